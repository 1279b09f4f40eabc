"""Developer tools for websummary (run with `python -m websummary.tools.<name>`)."""
