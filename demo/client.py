import os
import sys

import httpx
from dotenv import load_dotenv

load_dotenv()

API_URL = os.getenv("API_URL", "http://localhost:3456")
ADDRESS = os.getenv("WALLET_ADDRESS", "SP2J6ZY48GV1EZ5V2V5RB9MP66SW86PYKKNRV9EJ7")
PAYMENT_TXID = os.getenv("PAYMENT_TXID")
OUTPUT = os.getenv("OUTPUT", "card.png")

ENDPOINT = f"{API_URL}/card/{ADDRESS}"

with httpx.Client(timeout=120) as client:
    if not PAYMENT_TXID:
        response = client.get(ENDPOINT)
        print("Status:", response.status_code)
        body = response.json()
        if response.status_code != 402:
            raise SystemExit(f"expected a payment challenge, got: {body}")
        print("Prompt preview:\n" + body["prompt"] + "\n")
        for step in body["instructions"]:
            print(" -", step)
        print(f"\nChallenge expires at {body['expiresAt']}; rerun with PAYMENT_TXID=<txid>.")
        sys.exit(0)

    response = client.get(ENDPOINT, headers={"X-PAYMENT": PAYMENT_TXID})
    print("Status:", response.status_code)
    if response.status_code != 200:
        print("Body:", response.text)
        raise SystemExit(1)
    with open(OUTPUT, "wb") as handle:
        handle.write(response.content)
    print(f"Saved card for {response.headers.get('X-BNS-Name')} to {OUTPUT}")
