from treeshell.cli.main import main

main()
