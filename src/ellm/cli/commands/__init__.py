"""ellm CLI subcommands."""
