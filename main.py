"""
webflow - OAuth2 Authorization Code flow for local applications

Opens the provider's consent page in the default browser, catches the redirect
on a short-lived local listener, exchanges the code for an access token and
prints a summary of the result.
"""

import asyncio
import logging
import sys
from webflow.auth import FlowConfig, run_flow
from webflow.display import ConsoleDisplay
from config.settings import load_config, build_callback_settings

logger = logging.getLogger(__name__)


async def main() -> int:
    """Main application entry point."""
    try:
        config = load_config()
    except ValueError as e:
        logging.basicConfig(level=logging.INFO)
        logger.error(f"Configuration error: {e}")
        return 1

    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if config['app']['debug'] else config['app']['log_level'].upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    logger.info("Starting authorization code flow...")
    flow_config = FlowConfig.from_mapping(config['oauth'])
    settings = build_callback_settings(config)

    result = await run_flow(flow_config, settings)

    display = ConsoleDisplay(
        use_colors=sys.stdout.isatty(),
        output_format=config['app']['console_output_format'],
    )
    display.show_result(result)

    if result.ok:
        logger.info("Authorization code flow completed successfully!")
        return 0
    return 1


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
