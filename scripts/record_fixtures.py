"""Record live Roblox API payloads into tests/fixtures for offline tests."""

import asyncio
import json
import sys
from pathlib import Path

from rbxprofile.config import AggregatorConfig
from rbxprofile.core.aggregator import ENRICHMENT_ENDPOINTS
from rbxprofile.core.client import UpstreamClient
from rbxprofile.core.endpoints import LOOKUP_USERNAME, USER_DETAILS

USERNAMES = [
    "builderman",
]

FIXTURES_DIR = Path(__file__).parent.parent / "tests" / "fixtures"


async def record_account(client: UpstreamClient, username: str) -> bool:
    """Fetch every upstream payload for one account and save them together."""
    print(f"\n{'='*60}")
    print(f"Recording {username}...")
    print(f"{'='*60}")

    lookup = await client.call(
        LOOKUP_USERNAME,
        body={"usernames": [username], "excludeBannedUsers": False},
    )
    if not lookup.ok or not lookup.payload.get("data"):
        print(f"  Lookup failed: {lookup.error or 'no match'}")
        return False

    user_id = lookup.payload["data"][0]["id"]
    payloads = {LOOKUP_USERNAME.name: lookup.payload}

    for endpoint in (USER_DETAILS, *ENRICHMENT_ENDPOINTS):
        result = await client.call(endpoint, user_id=user_id)
        status = "ok" if result.ok else f"FAILED ({result.error})"
        print(f"  {endpoint.name:<18} {status}")
        if result.ok:
            payloads[endpoint.name] = result.payload

    FIXTURES_DIR.mkdir(parents=True, exist_ok=True)
    path = FIXTURES_DIR / f"{username.lower()}.json"
    path.write_text(json.dumps(payloads, indent=2), encoding="utf-8")
    print(f"\nSaved fixture: {path}")
    return len(payloads) == len(ENRICHMENT_ENDPOINTS) + 2


async def main():
    usernames = sys.argv[1:] or USERNAMES
    results = []
    async with UpstreamClient(AggregatorConfig()) as client:
        for username in usernames:
            results.append(await record_account(client, username))
            # Stay well inside the public API limits
            await asyncio.sleep(2)

    print(f"\nRecorded: {sum(results)}/{len(results)}")
    if not all(results):
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
