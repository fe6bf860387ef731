from teecp.cli.app import main

main()
