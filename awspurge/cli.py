"""awspurge CLI entry point."""
import argparse
import logging
import sys

from botocore.exceptions import BotoCoreError, ClientError

from awspurge.core.account import Account
from awspurge.core.config import PurgeParameters, load_config
from awspurge.core.errors import PurgeError
from awspurge.core.logging import setup_logging, get_run_id
from awspurge.purger import Purger


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='awspurge - remove every resource in an AWS account')
    parser.add_argument('--config', '-c', required=True, help='Path to YAML config file')
    parser.add_argument('--profile', help='AWS profile to use')
    parser.add_argument('--target', '-t', action='append', default=[],
                        help='Limit purging to this resource type (repeatable)')
    parser.add_argument('--exclude', '-e', action='append', default=[],
                        help='Never purge this resource type (repeatable)')
    parser.add_argument('--cloud-control', action='append', default=[],
                        help='Purge this type through the Cloud Control API (repeatable)')
    parser.add_argument('--no-dry-run', action='store_true',
                        help='Actually delete resources (default: dry-run)')
    parser.add_argument('--force', action='store_true',
                        help='Do not ask for confirmation; wait --force-sleep seconds instead')
    parser.add_argument('--force-sleep', type=int, default=15,
                        help='Seconds to wait before purging when --force is set (min 3)')
    parser.add_argument('--max-wait-retries', type=int, default=0,
                        help='Give up after this many rounds with only waiting resources (0 = never)')
    parser.add_argument('-q', '--quiet', action='store_true',
                        help='Do not print filtered resources')
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='Verbosity: -v=INFO, -vv=DEBUG, -vvv=DEBUG including botocore')
    parser.add_argument('--json-logs', action='store_true',
                        help='Output logs in JSON format')
    return parser.parse_args(argv)


def build_parameters(args) -> PurgeParameters:
    return PurgeParameters(
        config_path=args.config,
        targets=args.target,
        excludes=args.exclude,
        cloud_control=args.cloud_control,
        no_dry_run=args.no_dry_run,
        force=args.force,
        force_sleep=args.force_sleep,
        quiet=args.quiet,
        max_wait_retries=args.max_wait_retries,
    )


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.verbose, args.json_logs)

    params = build_parameters(args)
    logging.info(f"awspurge run_id={get_run_id()} no_dry_run={params.no_dry_run}")

    try:
        config = load_config(params.config_path)
        account = Account(profile=args.profile)
        Purger(params, account, config).run()
    except KeyboardInterrupt:
        logging.info("Cancelled by user")
        return 130
    except (PurgeError, FileNotFoundError) as e:
        logging.error(str(e))
        return 1
    except (ClientError, BotoCoreError) as e:
        logging.error(f"AWS error: {e}")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
