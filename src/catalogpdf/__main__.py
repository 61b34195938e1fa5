from catalogpdf.cli.main import main

main()
