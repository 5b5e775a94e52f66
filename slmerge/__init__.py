"""slmerge command-line application."""
