from ncloud_mcp.presentation.cli.cli import main

main()
