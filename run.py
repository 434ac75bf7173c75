#!/usr/bin/env python3
"""
Main entry point for running the FilmMatch Flask application.
"""

from filmmatch.app import create_app

app = create_app()

if __name__ == "__main__":
    app.run(debug=True)
