from kzrate.app import main

main()
