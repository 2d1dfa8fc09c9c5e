import click
from config_manager import ConfigManager
from utils.input_utils import TargetKind
from utils_handler import UtilsHandler


def format_value(value) -> str:
    """Render a parsed value for the console."""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


@click.group()
@click.option('-c', '--conf', default=None, help='Path to a custom configuration file')
@click.option('-l', '--locale', 'locale_tag', default=None, help='Input locale: invariant, system, or a tag such as tr_TR')
@click.option('-d', '--decimal-point', default=None, help='Decimal point character for float and decimal input')
@click.pass_context
def cli(ctx, conf, locale_tag, decimal_point):
    """
    Prompt for typed values on the console
    """
    ctx.ensure_object(dict)
    try:
        config_manager = ConfigManager(conf)
    except FileNotFoundError as e:
        raise click.ClickException(str(e))

    options = {}
    if locale_tag:
        options['locale'] = locale_tag
    if decimal_point:
        options['decimal_point'] = decimal_point
    config = config_manager.create_runtime_config(options)

    utils = UtilsHandler(config)
    utils.logger.settings(config.get_effective())
    ctx.obj['CONFIG'] = config
    ctx.obj['UTILS'] = utils


@cli.command()
@click.argument('kind', type=click.Choice([k.value for k in TargetKind], case_sensitive=False))
@click.option('-p', '--prompt', default='', help='Text shown before reading the line')
@click.option('-r', '--retry', 'attempts', type=int, default=None, help='Re-prompt up to this many times on invalid input')
@click.option('--default', 'default', default=None, help='Printed instead of failing when no valid value is read')
@click.pass_context
def ask(ctx, kind, prompt, attempts, default):
    """
    Read one value of KIND from standard input and print it
    """
    handler = ctx.obj['UTILS'].input
    if attempts is None:
        attempts = ctx.obj['CONFIG'].get_option('INPUT', 'retry_attempts', fallback=None)
    if attempts is not None and int(attempts) > 1:
        value = handler.ask(prompt, kind, attempts=int(attempts))
        success = value is not None
    else:
        value, success = handler.try_get_input(prompt, kind)

    if success:
        click.echo(format_value(value))
    elif default is not None:
        click.echo(default)
    else:
        ctx.exit(1)


@cli.command()
def kinds():
    """
    List the supported kinds and the values they accept
    """
    for kind in TargetKind:
        click.echo(f"{kind.value:<8} {kind.describe()}")


if __name__ == '__main__':
    cli()
