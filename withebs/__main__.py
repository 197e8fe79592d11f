from withebs.main import main

main()
