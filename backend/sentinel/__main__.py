from sentinel.main import main

main()
