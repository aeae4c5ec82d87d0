from layout_sidecar.server import main

main()
