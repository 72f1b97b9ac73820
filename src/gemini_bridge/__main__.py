from gemini_bridge.cli.main import app

app()
