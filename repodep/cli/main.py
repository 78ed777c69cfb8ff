"""
Main CLI entry point for repodep

Commands, with short aliases:
- repodep check / repodep c          Can these packages be satisfied?
- repodep whatprovides / repodep wp  Which packages provide a capability?
- repodep repos / repodep r          Which repositories are configured?
"""

import argparse
import sys

from .. import __version__
from ..core.config import ConfigError, load_config


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with all commands and aliases."""

    parser = argparse.ArgumentParser(
        prog='repodep',
        description='Dependency satisfiability checker for RPM repositories',
        epilog='Use "repodep <command> --help" for command-specific help.'
    )

    parser.add_argument(
        '--version', '-V',
        action='version',
        version=f'repodep {__version__}'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Verbose output'
    )

    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Quiet output'
    )

    parser.add_argument(
        '--nocolor',
        action='store_true',
        help='Disable colored output'
    )

    # Parent parser for repository selection (inherited by subparsers)
    repo_parent = argparse.ArgumentParser(add_help=False)
    repo_parent.add_argument(
        '--config',
        metavar='FILE',
        help='YAML config file (default: ~/.config/repodep/config.yaml)'
    )
    repo_parent.add_argument(
        '--baseurl',
        metavar='URL',
        help='Repository base URL (directory holding repodata/)'
    )
    repo_parent.add_argument(
        '--repo-file',
        metavar='FILE',
        help='Read repositories from a .repo file'
    )
    repo_parent.add_argument(
        '--repos-dir',
        metavar='DIR',
        help='Read repositories from every .repo file of a directory'
    )
    repo_parent.add_argument(
        '--repo',
        metavar='ID',
        help='Only use the repository with this id or name'
    )
    repo_parent.add_argument(
        '--timeout',
        type=int,
        metavar='SECONDS',
        help='Network timeout'
    )
    repo_parent.add_argument(
        '--json',
        action='store_true',
        help='JSON output for scripting'
    )

    subparsers = parser.add_subparsers(
        dest='command',
        title='commands',
        metavar='<command>'
    )

    # =========================================================================
    # check / c
    # =========================================================================
    check_parser = subparsers.add_parser(
        'check', aliases=['c'],
        help='Check whether packages can be satisfied in the repository',
        parents=[repo_parent]
    )
    check_parser.add_argument(
        'packages', nargs='+',
        help='Package names to check'
    )
    check_parser.add_argument(
        '--max-steps',
        type=int,
        metavar='N',
        help='Give up after N processed requirements per package'
    )
    check_parser.add_argument(
        '--explain',
        action='store_true',
        help='Show why a package is not satisfiable (or what satisfies it)'
    )

    # =========================================================================
    # whatprovides / wp
    # =========================================================================
    wp_parser = subparsers.add_parser(
        'whatprovides', aliases=['wp'],
        help='List packages providing a capability',
        parents=[repo_parent]
    )
    wp_parser.add_argument(
        'capability',
        help='Capability, optionally versioned (e.g. "libfoo >= 1.2")'
    )

    # =========================================================================
    # repos / r
    # =========================================================================
    subparsers.add_parser(
        'repos', aliases=['r'],
        help='List configured repositories',
        parents=[repo_parent]
    )

    return parser


# =============================================================================
# Main entry point
# =============================================================================

def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    # Configure logging based on verbose flag
    if getattr(args, 'verbose', False):
        import logging
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(name)s - %(levelname)s - %(message)s',
            stream=sys.stderr
        )

    # Initialize color support
    from . import colors
    colors.init(nocolor=getattr(args, 'nocolor', False))

    if not args.command:
        parser.print_help()
        return 1

    from .commands import cmd_check, cmd_repos, cmd_whatprovides

    try:
        config = load_config(getattr(args, 'config', None))

        # Route to command handler
        if args.command in ('check', 'c'):
            return cmd_check(args, config)

        elif args.command in ('whatprovides', 'wp'):
            return cmd_whatprovides(args, config)

        elif args.command in ('repos', 'r'):
            return cmd_repos(args, config)

        else:
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130

    except ConfigError as e:
        print(colors.error(f"Error: {e}"), file=sys.stderr)
        return 1

    except Exception as e:
        if args.verbose:
            import traceback
            traceback.print_exc()
        else:
            print(f"Error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
