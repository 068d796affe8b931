from zig_master.cli import main

main()
