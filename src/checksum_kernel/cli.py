"""checksum-kernel command line interface."""

import logging
import sys
import traceback
from pathlib import Path

import click

from . import __version__
from .archive import read_bundle, write_bundle
from .crypto import generate_key_pair, load_private_key
from .errors import ChecksumError, IOFailure, PassphraseRequired
from .keys import read_key_file, write_private_key_file
from .sign import SignOptions, attach_payloads, sign_bundle
from .summary import format_verification_summary
from .verify import VerifyOptions, verify_bundle


def handle_error(error: Exception, debug: bool) -> None:
    """Report a failure and exit with status 1."""
    if debug:
        traceback.print_exc()
    else:
        click.echo(f"Error: {error}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="checksum-kernel")
@click.option('--debug', is_flag=True, help='Enable debug logging and full tracebacks')
@click.pass_context
def cli(ctx: click.Context, debug: bool):
    """Create and verify checksum manifests for zip bundles."""
    ctx.ensure_object(dict)
    ctx.obj['debug'] = debug
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.argument('bundle_path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    '--private-key',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    envvar='CHECKSUM_PRIVATE_KEY',
    help='PEM private key used to sign the manifest',
)
@click.option('--passphrase', envvar='CHECKSUM_PASSPHRASE', help='Private key passphrase (prompted if needed)')
@click.option('--workers', type=click.IntRange(min=1), help='Digest files on this many threads')
@click.pass_context
def sign(
    ctx: click.Context,
    bundle_path: Path,
    private_key: Path | None,
    passphrase: str | None,
    workers: int | None,
):
    """Write a checksum manifest (and optional signature) into BUNDLE_PATH."""
    debug = ctx.obj.get('debug', False)

    try:
        bundle = read_bundle(bundle_path)

        key = None
        if private_key:
            armored = read_key_file(private_key)
            try:
                key = load_private_key(armored)
            except PassphraseRequired:
                if passphrase is None:
                    passphrase = click.prompt('Private key passphrase', hide_input=True)
                key = load_private_key(armored, passphrase)

        payloads = sign_bundle(bundle.files, key, options=SignOptions(max_workers=workers))
        write_bundle(bundle_path, attach_payloads(bundle.files, payloads))

        names = ", ".join(payload.path for payload in payloads)
        click.echo(f"Wrote {names} to {bundle_path} ({len(bundle.files)} files)")
    except ChecksumError as e:
        handle_error(e, debug)


@cli.command()
@click.argument('bundle_path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    '--public-key',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    envvar='CHECKSUM_PUBLIC_KEY',
    help='Public key the manifest signature must verify against',
)
@click.option('--workers', type=click.IntRange(min=1), help='Digest files on this many threads')
@click.pass_context
def verify(ctx: click.Context, bundle_path: Path, public_key: Path | None, workers: int | None):
    """Verify BUNDLE_PATH against its checksum manifest and signature."""
    debug = ctx.obj.get('debug', False)

    try:
        bundle = read_bundle(bundle_path)
        options = VerifyOptions(
            public_key=read_key_file(public_key) if public_key else None,
            max_workers=workers,
        )
        result = verify_bundle(bundle, options)
        click.echo(format_verification_summary(result, str(bundle_path)))
    except ChecksumError as e:
        handle_error(e, debug)


@cli.command()
@click.argument('output_dir', type=click.Path(file_okay=False, path_type=Path))
@click.option('--name', default='checksum', show_default=True, help='Base name of the key files')
@click.option('--passphrase', envvar='CHECKSUM_PASSPHRASE', help='Encrypt the private key with this passphrase')
@click.pass_context
def keygen(ctx: click.Context, output_dir: Path, name: str, passphrase: str | None):
    """Generate an Ed25519 signing key pair in OUTPUT_DIR."""
    debug = ctx.obj.get('debug', False)

    private_path = output_dir / f"{name}.key"
    public_path = output_dir / f"{name}.pub"

    try:
        private_pem, public_pem = generate_key_pair(passphrase)
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            public_path.write_bytes(public_pem)
        except OSError as exc:
            raise IOFailure(f"Cannot write key files to {output_dir}: {exc}") from exc
        write_private_key_file(private_path, private_pem)

        click.echo(f"Private key: {private_path}")
        click.echo(f"Public key:  {public_path}")
    except ChecksumError as e:
        handle_error(e, debug)


def main() -> None:
    cli(obj={})


if __name__ == '__main__':
    main()
