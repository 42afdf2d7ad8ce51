from .xcor import main

main()
