from trackview.cli import main

main()
