import asyncio

import click

from config_manager import ConfigManager
from core.models import FetchError, FetchFailed, FetchSucceeded, Quote
from core.view_model import QuoteViewModel
from providers.mock_quote_service import MockQuoteService
from providers.quote_service import QuoteService
from ui.cli import CLIUI
from utils.logging_utils import LoggingHandler
from utils.output_utils import OutputHandler

QUIT_WORDS = ('q', 'quit', 'exit')
REFRESH_WORDS = ('', 'r', 'refresh')


@click.group(invoke_without_command=True)
@click.option('-c', '--conf', default=None, help='Path to a custom configuration file')
@click.option('--mock-quote', default=None, help='Serve this quote text instead of calling the remote endpoint')
@click.option('--mock-author', default='Unknown', show_default=True, help='Author for --mock-quote')
@click.option('--mock-error', default=None, help='Fail every fetch with this error message')
@click.option('-v', '--verbose', default=False, is_flag=True, help='Show debug output and log effective settings')
@click.pass_context
def cli(ctx, conf, mock_quote, mock_author, mock_error, verbose):
    """
    the main entry point for the CLI click interface
    """
    ctx.ensure_object(dict)

    if mock_quote and mock_error:
        raise click.UsageError('--mock-quote and --mock-error are mutually exclusive')

    try:
        config_manager = ConfigManager(conf)
    except FileNotFoundError as e:
        raise click.ClickException(str(e))

    overrides = {}
    if verbose:
        overrides['output_level'] = 'DEBUG'
    config = config_manager.create_app_config(overrides)

    output = OutputHandler(config)
    logger = LoggingHandler(config, output_handler=output)
    logger.settings({
        'endpoint': config.get_option('QUOTES', 'endpoint'),
        'timeout': config.get_option('QUOTES', 'timeout'),
        'mock': bool(mock_quote or mock_error),
    })
    if logger.active():
        output.debug(f"Logging to {logger.log_path}")

    if mock_error:
        service = MockQuoteService(error=FetchError(mock_error))
    elif mock_quote:
        service = MockQuoteService(value=Quote(content=mock_quote, author=mock_author))
    else:
        service = QuoteService.from_config(config, logger=logger)

    ctx.obj['CONFIG'] = config
    ctx.obj['OUTPUT'] = output
    ctx.obj['LOGGER'] = logger
    ctx.obj['SERVICE'] = service

    if ctx.invoked_subcommand is None:
        ctx.invoke(run)


def _build(ctx):
    config = ctx.obj['CONFIG']
    ui = CLIUI(ctx.obj['OUTPUT'], show_author=bool(config.get_option('QUOTES', 'show_author', fallback=True)))
    view_model = QuoteViewModel(ctx.obj['SERVICE'], logger=ctx.obj['LOGGER'])
    return ui, view_model


def _read_line():
    line = click.get_text_stream('stdin').readline()
    if not line:
        return None
    return line.rstrip('\r\n')


async def _interactive(ui, view_model, read_line=_read_line):
    ui.bind(view_model)
    ui.emit('status', {'message': "Press Enter (or 'r') for a new quote, 'q' to quit."})
    ui.view_appeared()
    try:
        while True:
            line = await asyncio.to_thread(read_line)
            if line is None:
                break
            word = line.strip().lower()
            if word in QUIT_WORDS:
                break
            if word in REFRESH_WORDS:
                ui.refresh_requested()
            else:
                ui.emit('warning', {'message': f"Unknown command '{line.strip()}'."})
    finally:
        ui.close()
        await view_model.close()
        await ui.wait_closed()


async def _fetch_once(ui, view_model):
    """Run a single attempt and return its terminal event."""
    outputs = view_model.transform(ui.inputs)
    ui.view_appeared()
    terminal = None
    try:
        async for event in outputs:
            ui.render(event)
            if isinstance(event, (FetchSucceeded, FetchFailed)):
                terminal = event
            if terminal is not None and ui.refresh_enabled:
                break
    finally:
        ui.close()
        await view_model.close()
    return terminal


@cli.command()
@click.pass_context
def run(ctx):
    """
    Interactive session: show a quote, refresh on demand
    """
    ui, view_model = _build(ctx)
    asyncio.run(_interactive(ui, view_model))


@cli.command()
@click.pass_context
def fetch(ctx):
    """
    Fetch and print a single quote
    """
    ui, view_model = _build(ctx)
    terminal = asyncio.run(_fetch_once(ui, view_model))
    if not isinstance(terminal, FetchSucceeded):
        ctx.exit(1)


if __name__ == '__main__':
    cli()
