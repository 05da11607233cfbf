from toolbuild.cli import main

main()
