import os
import sys
import time

import requests

SERVER_URL = os.environ.get("VOCADRILL_SERVER_URL", "http://127.0.0.1:8777")
MAX_RETRIES = 30
DELAY = 1


def check_server():
    try:
        response = requests.get(f"{SERVER_URL}/health", timeout=1)
        if response.status_code == 200:
            print(f"vocadrill is ready! Version: {response.json().get('version')}")
            return True
    except requests.exceptions.RequestException:
        pass
    return False


def main():
    print(f"Waiting for vocadrill at {SERVER_URL}...")
    for i in range(MAX_RETRIES):
        if check_server():
            sys.exit(0)
        time.sleep(DELAY)
        print(f"Retry {i + 1}/{MAX_RETRIES}...")

    print("Timed out waiting for vocadrill.")
    sys.exit(1)


if __name__ == "__main__":
    main()
