from depvendor.cli import main

main()
