from protolink.cli.app import main

main()
