from priorart.cli import main

main()
