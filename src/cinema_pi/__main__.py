from cinema_pi.cli import main

main()
