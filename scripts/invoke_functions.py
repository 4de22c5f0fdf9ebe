#!/usr/bin/env python3
"""
Smoke-test script for the deployed seed_data and update_user cloud functions.

Usage:
  python scripts/invoke_functions.py --base-url https://REGION-PROJECT.cloudfunctions.net --key KEY seed --users 5
  python scripts/invoke_functions.py --base-url ... --key KEY update --id USER_ID --updates '{"username": "Foo"}'
"""

import json
import argparse
import requests
import sys


def call_function(url, key, data):
    """
    POST a JSON payload to a cloud function, authenticating with the x-seed-key header.

    Returns:
        tuple: (status code, decoded JSON body)
    """
    print(f"Sending request to {url}")
    print(f"Request data: {json.dumps(data, indent=2)}")

    response = requests.post(url, json=data, headers={'x-seed-key': key}, timeout=540)

    try:
        response_data = response.json()
    except ValueError:
        response_data = {'ok': False, 'error': response.text}

    print(f"Response status code: {response.status_code}")
    print(f"Response data: {json.dumps(response_data, indent=2)}")

    return response.status_code, response_data


def seed(base_url, key, users=None, artists=None, albums_per_artist=None, reviews_per_user=None):
    data = {
        'users': users,
        'artists': artists,
        'albumsPerArtist': albums_per_artist,
        'reviewsPerUser': reviews_per_user,
    }
    data = {k: v for k, v in data.items() if v is not None}
    return call_function(f"{base_url}/seed_data", key, data)


def update(base_url, key, user_id, updates):
    return call_function(f"{base_url}/update_user", key, {'id': user_id, 'updates': updates})


def main():
    parser = argparse.ArgumentParser(description="Call the seed_data / update_user cloud functions")
    parser.add_argument("--base-url", required=True, help="Base URL of the cloud functions")
    parser.add_argument("--key", required=True, help="Seed key configured on the functions")
    subparsers = parser.add_subparsers(dest="command", required=True)

    seed_parser = subparsers.add_parser("seed", help="Generate fake users, artists, albums and reviews")
    seed_parser.add_argument("--users", type=int)
    seed_parser.add_argument("--artists", type=int)
    seed_parser.add_argument("--albums-per-artist", type=int)
    seed_parser.add_argument("--reviews-per-user", type=int)

    update_parser = subparsers.add_parser("update", help="Apply a partial update to one user")
    update_parser.add_argument("--id", required=True, help="User document id")
    update_parser.add_argument("--updates", required=True, help="JSON object of field -> value")

    args = parser.parse_args()
    base_url = args.base_url.rstrip('/')

    try:
        if args.command == "seed":
            status, _ = seed(base_url, args.key, args.users, args.artists,
                             args.albums_per_artist, args.reviews_per_user)
        else:
            try:
                updates = json.loads(args.updates)
            except ValueError as e:
                print(f"Error parsing --updates: {str(e)}")
                sys.exit(2)
            status, _ = update(base_url, args.key, args.id, updates)
    except requests.exceptions.RequestException as e:
        print(f"Error: {str(e)}")
        sys.exit(1)

    sys.exit(0 if status == 200 else 1)


if __name__ == "__main__":
    main()
