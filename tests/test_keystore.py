"""
Tests for the key store and accounts.
"""
import json
import os
import stat

import pytest
from eth_account import Account as EthAccount

from harmony_lib.accounts import Account, KeyStore
from harmony_lib.accounts.key_store import HD_PATH, LIGHT_SCRYPT_N, identity_from_mnemonic
from harmony_lib.address import to_bech32
from harmony_lib.exceptions import (
    AccountExistsError, AccountLockedError, BadKeyLengthError, InvalidMnemonicError, KeystoreError,
    MissingAccountError
)

from conftest import TEST_PASSPHRASE, TEST_PRIV_KEY

TEST_MNEMONIC = "test test test test test test test test test test test junk"
ETH_PATH = "m/44'/60'/0'/0/0"


@pytest.fixture
def stored(key_store, test_identity):
    name = key_store.import_private_key(TEST_PRIV_KEY, "alice", TEST_PASSPHRASE)
    return name, to_bech32(test_identity.address)


def test_import_private_key(key_store, stored):
    name, address = stored

    assert name == "alice"
    assert key_store.names() == ["alice"]
    assert key_store.find_by_name("alice") == address
    assert key_store.find_by_address(address) == "alice"
    assert key_store.find_by_name("bob") is None
    assert key_store.find_by_address("not an address") is None


@pytest.mark.skipif(os.name != "posix", reason="permission bits are posix only")
def test_key_files_are_private(key_store, stored):
    assert stat.S_IMODE(os.stat(key_store.store_path).st_mode) == 0o700
    assert stat.S_IMODE(os.stat(key_store.store_path / "alice.json").st_mode) == 0o600


def test_import_without_name_picks_random_name(key_store):
    name = key_store.import_private_key(TEST_PRIV_KEY[2:], None, TEST_PASSPHRASE)
    assert name.endswith("-imported")
    assert key_store.exists(name)


@pytest.mark.parametrize("key", ["0x1234", "zz" * 32, "0x" + "ab" * 33])
def test_bad_private_key(key_store, key):
    with pytest.raises(BadKeyLengthError):
        key_store.import_private_key(key, "bad", TEST_PASSPHRASE)
    assert key_store.names() == []


def test_duplicate_name(key_store, stored):
    with pytest.raises(AccountExistsError):
        key_store.import_private_key("0x" + "11" * 32, "alice", TEST_PASSPHRASE)


def test_unlock(key_store, stored, test_identity):
    name, address = stored

    assert key_store.unlock(address, TEST_PASSPHRASE).address == test_identity.address
    assert key_store.unlock(name, TEST_PASSPHRASE).address == test_identity.address

    with pytest.raises(AccountLockedError):
        key_store.unlock(address, "wrong")
    with pytest.raises(KeystoreError):
        key_store.unlock("one1" + "q" * 38, TEST_PASSPHRASE)


def test_invalid_account_name(key_store):
    with pytest.raises(KeystoreError):
        key_store.exists("../escape")


def test_export_and_import_keystore_file(key_store, stored, tmp_path, test_identity):
    _, address = stored
    exported = key_store.export_keystore(address, TEST_PASSPHRASE, "new-pass")
    path = tmp_path / "exported.json"
    path.write_bytes(exported)

    assert EthAccount.decrypt(json.loads(exported), "new-pass") == test_identity.key

    other = KeyStore(str(tmp_path / "other"), scrypt_n=LIGHT_SCRYPT_N)
    with pytest.raises(AccountLockedError):
        other.import_keystore_file(str(path), "copy", TEST_PASSPHRASE)
    assert other.import_keystore_file(str(path), "copy", "new-pass") == "copy"
    assert other.find_by_name("copy") == address


def test_import_missing_keystore_file(key_store, tmp_path):
    with pytest.raises(KeystoreError):
        key_store.import_keystore_file(str(tmp_path / "missing.json"), None, TEST_PASSPHRASE)


def test_delete(key_store, stored):
    key_store.delete("alice")
    assert key_store.names() == []
    key_store.delete("alice")


def test_account_unlock_is_idempotent(key_store, stored, test_identity):
    name, address = stored
    account = Account.find_by_name(name, key_store)
    account.passphrase = TEST_PASSPHRASE

    assert not account.unlocked
    identity = account.unlock()
    assert account.unlock() is identity
    assert identity.address == test_identity.address

    account.lock()
    assert not account.unlocked


def test_account_without_key_store():
    with pytest.raises(MissingAccountError):
        Account(name="ghost").unlock()


def test_account_wrong_passphrase(key_store, stored):
    account = Account.find_by_address(stored[1], key_store)
    account.passphrase = "wrong"
    with pytest.raises(AccountLockedError):
        account.unlock()


def test_generate_account(key_store):
    account = Account.generate("fresh", TEST_PASSPHRASE, key_store)

    assert account.unlocked
    assert key_store.find_by_name("fresh") == account.address
    assert key_store.unlock("fresh", TEST_PASSPHRASE).address == account.identity.address


def test_import_private_key_reuses_existing(key_store, stored):
    name, address = stored

    again = Account.import_private_key(TEST_PRIV_KEY, name="alice", passphrase=TEST_PASSPHRASE, key_store=key_store)
    by_address = Account.import_private_key(TEST_PRIV_KEY, address=address, key_store=key_store)

    assert again.address == address
    assert by_address.name == "alice"
    assert key_store.names() == ["alice"]


def test_import_private_key_creates_account(key_store):
    account = Account.import_private_key("0x" + "22" * 32, name="bob", passphrase="p", key_store=key_store)
    assert account.name == "bob"
    assert account.address == to_bech32(EthAccount.from_key("0x" + "22" * 32).address)


def test_account_export_keystore(key_store, stored, test_identity):
    account = Account.find_by_name("alice", key_store)
    account.passphrase = TEST_PASSPHRASE

    keyfile = json.loads(account.export_keystore("export-pass"))
    assert EthAccount.decrypt(keyfile, "export-pass") == test_identity.key


def test_account_import_keystore(key_store, tmp_path, test_identity):
    keyfile = EthAccount.encrypt(TEST_PRIV_KEY, "file-pass", iterations=LIGHT_SCRYPT_N)
    path = tmp_path / "key.json"
    path.write_text(json.dumps(keyfile))

    account = Account.import_keystore(str(path), name="carol", passphrase="file-pass", key_store=key_store)

    assert account.address == to_bech32(test_identity.address)
    assert account.unlock().address == test_identity.address


def test_mnemonic_derivation_follows_the_account_path():
    # well-known first account of this phrase on the Ethereum path
    assert identity_from_mnemonic(TEST_MNEMONIC, ETH_PATH).address == "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

    harmony = identity_from_mnemonic(TEST_MNEMONIC)
    assert HD_PATH == "m/44'/1023'/0'/0/0"
    assert harmony.address == EthAccount.from_mnemonic(TEST_MNEMONIC, account_path=HD_PATH).address
    assert harmony.address != "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


def test_invalid_mnemonic(key_store):
    with pytest.raises(InvalidMnemonicError):
        identity_from_mnemonic("not a real recovery phrase")
    with pytest.raises(InvalidMnemonicError):
        key_store.import_mnemonic(" ".join(["abandon"] * 12), "dave", TEST_PASSPHRASE)
    assert key_store.names() == []


def test_generate_account_from_mnemonic(key_store):
    account = Account.generate("fresh", TEST_PASSPHRASE, key_store, mnemonic=TEST_MNEMONIC)

    assert account.mnemonic == TEST_MNEMONIC
    assert account.identity.address == identity_from_mnemonic(TEST_MNEMONIC).address
    assert key_store.find_by_name("fresh") == to_bech32(account.identity.address)


def test_generate_account_creates_a_mnemonic(key_store):
    account = Account.generate("fresh", TEST_PASSPHRASE, key_store)

    assert len(account.mnemonic.split()) == 12
    assert identity_from_mnemonic(account.mnemonic).address == account.identity.address


def test_account_import_mnemonic(key_store):
    account = Account.import_mnemonic(TEST_MNEMONIC, name="erin", passphrase="p", key_store=key_store)
    again = Account.import_mnemonic(TEST_MNEMONIC, name="erin", key_store=key_store)

    expected = identity_from_mnemonic(TEST_MNEMONIC).address
    assert account.address == to_bech32(expected)
    assert account.unlock().address == expected
    assert again.address == account.address
    assert key_store.names() == ["erin"]
