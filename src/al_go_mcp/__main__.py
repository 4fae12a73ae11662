from __future__ import annotations

from al_go_mcp.server import main

main()
