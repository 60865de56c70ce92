"""
Tests for the Keystore CLI
"""

import pytest
from cli import main

SEED = "0x" + bytes(range(32)).hex()


def output_lines(capsys):
    return [line for line in capsys.readouterr().out.splitlines() if line.strip()]


class TestNamespacesCommand:
    """Test the namespaces subcommand."""

    def test_lists_all_namespaces(self, capsys):
        """Should list all five namespaces with their key type ids."""
        main(["namespaces"])
        lines = output_lines(capsys)

        assert len(lines) == 5
        assert lines[0].split() == ["aura", "aura"]
        assert lines[3].split() == ["grandpa", "gran"]


class TestGenerateCommand:
    """Test the generate subcommand."""

    def test_same_seed_same_keys(self, capsys):
        """Same seed should print the same keys."""
        main(["generate", "--namespace", "babe", "--count", "2", "--seed", SEED])
        first = [l for l in output_lines(capsys) if l.startswith("0x")]
        main(["generate", "--namespace", "babe", "--count", "2", "--seed", SEED])
        second = [l for l in output_lines(capsys) if l.startswith("0x")]

        assert len(first) == 2
        assert first[0] != first[1]
        assert first == second

    def test_seed_from_environment(self, capsys, monkeypatch):
        """KEYSTORE_SEED should seed the keystore like --seed."""
        monkeypatch.setenv("KEYSTORE_SEED", SEED)
        main(["generate", "--namespace", "aura", "--algorithm", "ed25519"])
        from_env = [l for l in output_lines(capsys) if l.startswith("0x")]

        main(["generate", "--namespace", "aura", "--algorithm", "ed25519", "--seed", SEED])
        from_arg = [l for l in output_lines(capsys) if l.startswith("0x")]

        assert from_env == from_arg

    def test_random_seed_without_configuration(self, capsys, clean_env):
        """Without a seed a warning should go to stderr."""
        main(["generate", "--namespace", "babe"])
        captured = capsys.readouterr()

        assert "random seed" in captured.err

    def test_accepts_key_type_id(self, capsys):
        """Namespaces should be accepted by key type id."""
        main(["generate", "--namespace", "gran", "--seed", SEED])

        assert any(l.startswith("0x") for l in output_lines(capsys))

    def test_rejects_unknown_namespace(self):
        """Unknown namespaces should exit with an error."""
        with pytest.raises(SystemExit):
            main(["generate", "--namespace", "nope", "--seed", SEED])

    def test_rejects_short_seed(self):
        """Seeds other than 32 bytes should exit with an error."""
        with pytest.raises(SystemExit):
            main(["generate", "--namespace", "babe", "--seed", "abcd"])


class TestSignCommand:
    """Test the sign subcommand."""

    def test_ed25519_signature_is_reproducible(self, capsys):
        """Text and hex input should give the same Ed25519 signature."""
        main(["sign", "hello", "--algorithm", "ed25519", "--namespace", "grandpa", "--seed", SEED])
        first = output_lines(capsys)
        main(["sign", "68656c6c6f", "--hex", "--algorithm", "ed25519", "--namespace", "grandpa", "--seed", SEED])
        second = output_lines(capsys)

        signatures = [l for l in first + second if l.startswith("Signature:")]
        assert len(signatures) == 2
        assert signatures[0] == signatures[1]


class TestVrfCommand:
    """Test the vrf subcommand."""

    def test_prints_proof(self, capsys):
        """Should print a 64-byte proof."""
        main([
            "vrf", "BABE",
            "--item", "slot number:u64=42",
            "--item", "chain randomness=abc",
            "--namespace", "babe",
            "--seed", SEED,
        ])
        proof_lines = [l for l in output_lines(capsys) if l.startswith("VRF Proof:")]

        assert len(proof_lines) == 1
        assert len(proof_lines[0].split()[-1]) == 2 + 128

    def test_rejects_malformed_item(self):
        """Items without a separator should exit with an error."""
        with pytest.raises(SystemExit):
            main(["vrf", "BABE", "--item", "missing-separator", "--namespace", "babe", "--seed", SEED])
