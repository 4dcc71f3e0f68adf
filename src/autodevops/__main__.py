from autodevops.cli import main

main()
