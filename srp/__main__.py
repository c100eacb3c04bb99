from srp.cli.app import main

main()
