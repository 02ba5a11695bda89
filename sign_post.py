import argparse
import json
import logging
import sys
from dataclasses import replace

from config import SignerConfig
from errors import SigningError
from post_policy import signature


def build_config(args):
    """Environment configuration overridden by any options given on the command line"""
    overrides = {
        'access_key': args.access_key,
        'secret_key': args.secret_key,
        'bucket': args.bucket,
        'region': args.region,
        'date': args.date,
        'success_url': args.success_url,
        'content_type_prefix': args.content_type_prefix,
        'min_size': args.min_size,
        'max_size': args.max_size,
        'expires_in': args.expires,
    }
    return replace(SignerConfig.from_env(), **{k: v for k, v in overrides.items() if v is not None})


def main(argv=None):
    parser = argparse.ArgumentParser(description='Generate a signed S3 POST form for a browser upload')
    parser.add_argument('key', help='Object key the file will be stored under')
    parser.add_argument('content_type', help='Content-Type of the file (e.g., image/png)')
    parser.add_argument('--access-key', help='Access key (default: $S3_ACCESS_KEY)')
    parser.add_argument('--secret-key', help='Secret key (default: $S3_SECRET_KEY)')
    parser.add_argument('--bucket', '-b', help='Bucket name (default: $S3_BUCKET)')
    parser.add_argument('--region', '-r', help='AWS region (default: $S3_REGION)')
    parser.add_argument('--date', '-d', help='Fixed x-amz-date in YYYYMMDDTHHMMSSZ format (default: now)')
    parser.add_argument('--success-url', help='success_action_redirect URL')
    parser.add_argument('--content-type-prefix', help='Accept any Content-Type starting with this prefix')
    parser.add_argument('--min-size', type=int, help='Minimum upload size in bytes (default: 0)')
    parser.add_argument('--max-size', type=int, help='Maximum upload size in bytes (default: 15000000)')
    parser.add_argument('--expires', '-e', type=int, help='Policy lifetime in seconds (default: 300)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Log signing details to stderr')

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        config = build_config(args).validate()
    except SigningError as e:
        parser.error(str(e))

    print(json.dumps(signature(args.key, args.content_type, config), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
