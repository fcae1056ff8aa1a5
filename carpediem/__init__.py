"""
Carpe Diem - Single-player resource-management card game engine.

Spend action points across a hand of four cards to collect victory points
over 13 days without running out of money or energy.

The package provides:
- A pure, synchronous rules engine (engine_core)
- Session management and the day orchestration driver (session)
- A REST API for presentation clients (api)
- A terminal client (cli)
"""

__version__ = "0.1.0"
