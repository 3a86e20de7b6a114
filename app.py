"""
ASGI entry point for SeedMix.

Run with ``uvicorn app:app``; configuration comes from the environment.
"""

from seedmix.api.backend import create_app

app = create_app()

if __name__ == "__main__":
    from seedmix.main import main

    main()
