"""CLI subcommands for rubigo."""
