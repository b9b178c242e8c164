#!/usr/bin/env python3
"""
Manta Python SDK - Word Count Job Example

Uploads every file in a local directory to Manta, runs a map/reduce job that
counts lines, words and characters across all of them, prints the total and
cleans up afterwards.

Run with:
    MANTA_URL=https://us-east.manta.joyent.com MANTA_USER=john \\
    MANTA_KEY=~/.ssh/john UPLOAD_DIR=. python examples/word_count.py
"""

import os
import sys
import time
from pathlib import Path

# Add src to path for development
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from manta_sdk import ClientConfig, MantaClient, MantaSDKError


JOB_DETAILS = {
    'jobName': 'total word count',
    'phases': [
        {'exec': 'wc'},
        {
            'type': 'reduce',
            'exec': "awk '{ l += $1; w += $2; c += $3 } END { print l, w, c }'",
        },
    ],
}


def upload_directory(client: MantaClient, dir_path: str, upload_dir: Path):
    """Create a Manta directory and upload the regular files of upload_dir into it"""
    client.put_directory(dir_path)

    for file_path in sorted(upload_dir.iterdir()):
        if not file_path.is_file():
            continue
        client.put_object(f"{dir_path}/{file_path.name}", file_path.read_bytes())
        print(f"   Uploaded {file_path.name}")


def run_word_count(client: MantaClient, dir_path: str) -> str:
    """Run the word count job over every object in dir_path and return its output"""
    job_path, _ = client.create_job(JOB_DETAILS)
    print(f"   Created job {job_path}")

    entries, _ = client.list_directory(dir_path)
    obj_paths = [f"{dir_path}/{e['name']}" for e in entries if e.get('type') == 'object']

    client.add_job_keys(job_path, obj_paths)

    # Map results are visible before this, but the reduce phase waits for
    # all input to be declared.
    client.end_job_input(job_path)

    while True:
        time.sleep(1)
        job, _ = client.get_job(job_path)
        if job.get('state') == 'done':
            break

    results, _ = client.get_job_output(job_path)
    data, _ = client.get_object(results[0])
    return data.decode('utf-8')


def cleanup(client: MantaClient, dir_path: str):
    """Remove the example objects and directory"""
    entries, _ = client.list_directory(dir_path)
    for entry in entries:
        client.delete_object(f"{dir_path}/{entry['name']}")
    client.delete_directory(dir_path)


def main():
    """Run the example"""
    upload_dir = Path(os.environ.get('UPLOAD_DIR', '.'))

    try:
        # One client is enough: it is thread-safe and pools its connections.
        config = ClientConfig.from_env(disable_ssl_verification=True)
        with MantaClient.from_config(config) as client:
            dir_path = f"/{config.user}/stor/manta-python-example"

            print("1. Uploading files...")
            upload_directory(client, dir_path, upload_dir)

            print("\n2. Running word count job...")
            output = run_word_count(client, dir_path)
            print(f"\n   lines, words, characters: {output.strip()}")

            print("\n3. Cleaning up...")
            cleanup(client, dir_path)
    except MantaSDKError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print("\nDone.")
    return 0


if __name__ == '__main__':
    sys.exit(main())
