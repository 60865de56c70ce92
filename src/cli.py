"""
Keystore CLI

Commands:
  namespaces - List key namespaces and their key type ids
  generate   - Generate keys from a seed and print the public keys
  sign       - Generate a key from a seed and sign a payload with it
  vrf        - Generate an Sr25519 key from a seed and produce a VRF proof

The keystore only lives in memory, so every invocation starts from the
seed again: the same seed always yields the same keys.
"""

import argparse
import asyncio
import os
import secrets
import sys


def _load_seed(args) -> bytes:
    """Resolve the keystore seed from --seed, KEYSTORE_SEED, or fresh entropy."""
    seed_hex = args.seed or os.environ.get("KEYSTORE_SEED")
    if not seed_hex:
        print("Warning: no --seed or KEYSTORE_SEED given, using a random seed", file=sys.stderr)
        return secrets.token_bytes(32)

    try:
        seed = bytes.fromhex(seed_hex.removeprefix("0x"))
    except ValueError:
        print("Error: seed must be hex encoded")
        sys.exit(1)
    if len(seed) != 32:
        print(f"Error: seed must be 32 bytes, got {len(seed)}")
        sys.exit(1)
    return seed


def _parse_namespace(value: str):
    from identity import KeyNamespace

    try:
        return KeyNamespace[value.upper()]
    except KeyError:
        pass
    try:
        return KeyNamespace.from_key_type_id(value.lower())
    except ValueError:
        names = ", ".join(n.name.lower() for n in KeyNamespace.all())
        raise argparse.ArgumentTypeError(f"invalid namespace {value!r} (choose from {names})")


def _parse_item(value: str):
    """Parse `label=text` (bytes) or `label:u64=N` (integer) transcript items."""
    name, sep, raw = value.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"transcript item must be label=value, got {value!r}")
    if name.endswith(":u64"):
        try:
            return name[:-4].encode(), int(raw, 0)
        except ValueError:
            raise argparse.ArgumentTypeError(f"invalid u64 value in {value!r}")
    return name.encode(), raw.encode()


def _payload(args) -> bytes:
    if args.hex:
        return bytes.fromhex(args.payload.removeprefix("0x"))
    return args.payload.encode()


async def _generate(keystore, algorithm: str, namespace):
    if algorithm == "ed25519":
        return await keystore.generate_ed25519(namespace)
    return await keystore.generate_sr25519(namespace)


def cmd_namespaces(args):
    """List key namespaces."""
    from identity import KeyNamespace

    for namespace in KeyNamespace.all():
        print(f"{namespace.name.lower():<22} {namespace.key_type_id.decode()}")


def cmd_generate(args):
    """Generate keys and print their public keys."""
    from identity import Keystore

    async def run():
        keystore = Keystore(_load_seed(args))
        return [await _generate(keystore, args.algorithm, args.namespace) for _ in range(args.count)]

    for public_key in asyncio.run(run()):
        print(f"0x{public_key.hex()}")


def cmd_sign(args):
    """Sign a payload with a freshly generated key."""
    from identity import Keystore

    payload = _payload(args)

    async def run():
        keystore = Keystore(_load_seed(args))
        public_key = await _generate(keystore, args.algorithm, args.namespace)
        return public_key, await keystore.sign(args.namespace, public_key, payload)

    public_key, signature = asyncio.run(run())
    print(f"Public Key: 0x{public_key.hex()}")
    print(f"Signature:  0x{signature.hex()}")


def cmd_vrf(args):
    """Produce a VRF proof with a freshly generated Sr25519 key."""
    from identity import Keystore

    async def run():
        keystore = Keystore(_load_seed(args))
        public_key = await keystore.generate_sr25519(args.namespace)
        signature = await keystore.sign_vrf(
            args.namespace,
            public_key,
            args.label.encode(),
            iter(args.item),
        )
        return public_key, signature

    public_key, signature = asyncio.run(run())
    print(f"Public Key: 0x{public_key.hex()}")
    print(f"VRF Proof:  0x{signature.proof.hex()}")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Keystore - in-memory consensus keys",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # namespaces
    subparsers.add_parser("namespaces", help="List key namespaces")

    # generate
    generate_parser = subparsers.add_parser("generate", help="Generate keys")
    generate_parser.add_argument("--algorithm", choices=["ed25519", "sr25519"], default="sr25519")
    generate_parser.add_argument("--namespace", type=_parse_namespace, required=True)
    generate_parser.add_argument("--count", type=int, default=1, help="Number of keys")
    generate_parser.add_argument("--seed", help="32-byte hex seed")

    # sign
    sign_parser = subparsers.add_parser("sign", help="Sign a payload")
    sign_parser.add_argument("payload", help="Payload to sign")
    sign_parser.add_argument("--hex", action="store_true", help="Payload is hex encoded")
    sign_parser.add_argument("--algorithm", choices=["ed25519", "sr25519"], default="sr25519")
    sign_parser.add_argument("--namespace", type=_parse_namespace, required=True)
    sign_parser.add_argument("--seed", help="32-byte hex seed")

    # vrf
    vrf_parser = subparsers.add_parser("vrf", help="Produce a VRF proof")
    vrf_parser.add_argument("label", help="Transcript label")
    vrf_parser.add_argument(
        "--item",
        type=_parse_item,
        action="append",
        default=[],
        help="Transcript item, label=text or label:u64=N (repeatable, order kept)",
    )
    vrf_parser.add_argument("--namespace", type=_parse_namespace, required=True)
    vrf_parser.add_argument("--seed", help="32-byte hex seed")

    args = parser.parse_args(argv)

    if args.command == "namespaces":
        cmd_namespaces(args)
    elif args.command == "generate":
        cmd_generate(args)
    elif args.command == "sign":
        cmd_sign(args)
    elif args.command == "vrf":
        cmd_vrf(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
