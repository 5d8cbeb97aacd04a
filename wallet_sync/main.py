"""Main module entrypoint for local runtime execution.

`sync` runs one Edenred to Wallet import and exits non-zero on failure;
`api` serves the trigger API.
"""

import argparse

import uvicorn

from wallet_sync.bootstrap import bootstrap_create_application, bootstrap_create_sync_orchestrator
from wallet_sync.config import config_load_settings
from wallet_sync.observability import configure_logging


def main() -> None:
    """Run selected runtime command with validated startup configuration.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
        SystemExit: Raised with code 1 when a sync run fails.
    """

    argument_parser = argparse.ArgumentParser(description="Edenred to Wallet sync runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="sync",
        choices=("sync", "api"),
        help="Runtime command: `sync` runs one import, `api` starts the trigger server",
        type=str,
    )
    parsed_arguments = argument_parser.parse_args()

    settings = config_load_settings()
    configure_logging(level=settings.log_level)

    if parsed_arguments.command == "sync":
        sync_orchestrator = bootstrap_create_sync_orchestrator(settings)
        execution_result = sync_orchestrator.job_execute(job_name="transaction_sync")
        print(execution_result.message)
        if not execution_result.succeeded:
            raise SystemExit(1)
        return

    application = bootstrap_create_application(settings)
    uvicorn.run(
        application,
        host=settings.application_host,
        port=settings.application_port,
    )


if __name__ == "__main__":
    main()
