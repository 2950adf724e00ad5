from unifi_relay.server import main

main()
