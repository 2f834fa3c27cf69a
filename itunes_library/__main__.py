from itunes_library.cli import main

main()
