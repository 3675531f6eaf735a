"""Entry point for `python -m jurisai`"""

from jurisai.cli.main import app

if __name__ == "__main__":
    app()
