import logging
import sys

from curious_presence import IPCClient, RichPresence

logging.basicConfig(level=logging.INFO)

if len(sys.argv) < 2:
    print("usage: presence.py <client id>")
    sys.exit(1)

ipc = IPCClient(sys.argv[1])
ipc.connect()
ipc.set_activity(RichPresence(state="foo", details="bar"))

print("Activity set! Press enter to exit...")
input()

ipc.close()
