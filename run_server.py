"""
Wrapper script for running the relay server.

Uses the HOST and PORT settings, so `PORT=9000 python run_server.py` works
like the `game-relay serve` command.
"""

if __name__ == "__main__":
    import uvicorn

    from game_relay.settings import app_settings

    uvicorn.run(
        "game_relay:application",
        factory=True,
        host=app_settings.HOST,
        port=app_settings.PORT,
    )
