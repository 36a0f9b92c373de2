#!/usr/bin/env python3
"""
ZKBallot Client Tools

Command-line helpers for the client half of the ballot wire format:
eligibility roots and proofs, and vote commitments.

Usage:
    zkballot merkle-root <address>... [--file FILE] [--json]
    zkballot merkle-proof --voter ADDRESS <address>... [--file FILE] [--json]
    zkballot verify-proof --voter ADDRESS --root ROOT <proof>...
    zkballot commitment --choice CHOICE [--salt SALT] [--json]
"""

import json
from typing import List, Optional, Tuple

import click
from eth_utils import encode_hex

from .. import __version__
from ..crypto.commitment import VoteChoice, compute_commitment, generate_salt
from ..crypto.merkle import eligibility_tree, leaf_for, verify_proof
from ..exceptions import BallotError


def read_addresses(addresses: Tuple[str, ...], file: Optional[str]) -> List[str]:
    """Addresses from arguments plus one per line of *file* (``#`` comments allowed)."""
    result = list(addresses)
    if file:
        with open(file, "r", encoding="utf-8") as f:
            for line in f:
                line = line.split("#", 1)[0].strip()
                if line:
                    result.append(line)
    if not result:
        raise click.UsageError("No addresses given")
    return result


@click.group()
@click.version_option(version=__version__, prog_name="zkballot")
def cli():
    """ZKBallot client tools

    Build eligibility trees and vote commitments compatible with the ballot.
    """
    pass


@cli.command("merkle-root")
@click.argument("addresses", nargs=-1)
@click.option("--file", "-f", type=click.Path(exists=True), help="File with one address per line")
@click.option("--json", "as_json", is_flag=True, help="Emit JSON")
def merkle_root_cmd(addresses: Tuple[str, ...], file: Optional[str], as_json: bool):
    """Print the eligibility root for a voter list.

    Examples:

        zkballot merkle-root 0x7099...79C8 0x3C44...93BC
    """
    voters = read_addresses(addresses, file)
    try:
        tree = eligibility_tree(voters)
    except BallotError as e:
        raise click.ClickException(str(e))

    if as_json:
        click.echo(json.dumps({"root": tree.hex_root, "voters": len(tree)}))
    else:
        click.echo(f"Voters:      {len(tree)}")
        click.echo(f"Merkle root: {click.style(tree.hex_root, fg='green')}")


@cli.command("merkle-proof")
@click.argument("addresses", nargs=-1)
@click.option("--voter", "-v", required=True, help="Address to prove")
@click.option("--file", "-f", type=click.Path(exists=True), help="File with one address per line")
@click.option("--json", "as_json", is_flag=True, help="Emit JSON")
def merkle_proof_cmd(addresses: Tuple[str, ...], voter: str, file: Optional[str], as_json: bool):
    """Print the inclusion proof of VOTER in the eligibility tree."""
    voters = read_addresses(addresses, file)
    try:
        tree = eligibility_tree(voters)
        proof = tree.get_hex_proof(leaf_for(voter))
    except BallotError as e:
        raise click.ClickException(str(e))

    if as_json:
        click.echo(json.dumps({"root": tree.hex_root, "voter": voter, "proof": proof}))
    else:
        click.echo(f"Merkle root: {tree.hex_root}")
        click.echo("Proof:")
        for node in proof:
            click.echo(f"  {node}")


@cli.command("verify-proof")
@click.argument("proof", nargs=-1)
@click.option("--voter", "-v", required=True, help="Address the proof is for")
@click.option("--root", "-r", required=True, help="Eligibility root")
def verify_proof_cmd(proof: Tuple[str, ...], voter: str, root: str):
    """Check a proof against a root; exits 1 when it does not verify."""
    try:
        ok = verify_proof(list(proof), root, leaf_for(voter))
    except BallotError as e:
        raise click.ClickException(str(e))

    if ok:
        click.echo(click.style("✓ Eligible", fg="green"))
    else:
        click.echo(click.style("✗ Proof does not verify", fg="red"))
        raise SystemExit(1)


@cli.command("commitment")
@click.option(
    "--choice", "-c",
    type=click.Choice([c.name.lower() for c in VoteChoice], case_sensitive=False),
    required=True,
    help="Vote choice",
)
@click.option("--salt", "-s", help="32-byte hex salt (default: random)")
@click.option("--json", "as_json", is_flag=True, help="Emit JSON")
def commitment_cmd(choice: str, salt: Optional[str], as_json: bool):
    """Compute a vote commitment.

    Keep the salt: it is required to reveal the vote.
    """
    secret = salt if salt else encode_hex(generate_salt())
    try:
        commitment = compute_commitment(choice, secret)
    except BallotError as e:
        raise click.ClickException(str(e))

    vote = VoteChoice.parse(choice)
    if as_json:
        click.echo(json.dumps({
            "choice": int(vote),
            "salt": secret,
            "commitment": encode_hex(commitment),
        }))
    else:
        click.echo(f"Choice:     {vote.name} ({int(vote)})")
        click.echo(f"Salt:       {secret}")
        click.echo(f"Commitment: {click.style(encode_hex(commitment), fg='green')}")
        click.echo()
        click.echo(click.style("IMPORTANT: Keep the salt secret until the reveal window!", fg="yellow"))


def main():
    cli()


if __name__ == "__main__":
    main()
