# ABOUTME: Package marker for mediaindex.cli.commands.
