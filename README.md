# safecli

A library for working with FilesContainers: versioned maps of files whose
contents are stored as published immutable data, addressed by 32-byte XOR
names. The store is `FakeVault`, a local stand-in that keeps its state in
memory and writes it to a JSON file, so everything runs without a network.

## Installation

```
pip install .
```

To run the test suite:

```
pip install .[test]
pytest
```

## Concepts

- **XOR name**: a 32-byte address (`bytes`). `safecli.primitives.xorname_from_pk`
  derives one from a public key, `random_xorname` makes a fresh one and
  `xorname_to_hex` gives its hex form.
- **Published immutable data**: a blob of bytes stored at an XOR name.
- **FilesContainer**: sequential append-only data whose entries are the
  versions of a FilesMap, starting at version 0. A FilesMap maps paths such as
  `/subfolder/file.md` to a file item with `link`, `type`, `size`, `modified`
  and `created` entries (see `safecli.constants.Predicate`). The `link` is the
  hex XOR name of the file's immutable data, or empty on a dry run. The `type`
  is the file's extension, or `unknown`.
- **Processed files**: a report mapping each local path (or, for deletions,
  each container path) to a change sign and a link. The signs are `+` added,
  `*` updated, `-` deleted and `E` error (see `safecli.constants.ChangeSign`).
  Hidden files and folders are skipped when a folder is walked.

## Usage

```python
from safecli.fake_vault import FakeVault
from safecli.containers import FilesContainers

with FakeVault("fake_vault_data.json") as vault:
    containers = FilesContainers(vault)

    # A trailing slash puts the folder's contents at the root of the container;
    # without it they go under "/<folder name>/".
    xorname, processed, files_map = containers.create(
        "./site/", dest=None, recursive=True, dry_run=False
    )

    version, current = containers.get(xorname)        # latest version
    version0, first = containers.get(xorname, 0)      # a given version

    # Sync a folder into the container, dropping files that are no longer there.
    version, processed, files_map = containers.sync(
        "./site/", xorname, recursive=True, delete=True, dry_run=False, dest_path=None
    )

    blob_name = containers.put_published_immutable(b"hello")
    assert containers.get_published_immutable(blob_name) == b"hello"
```

`create` with `dry_run=True` uploads nothing and returns `None` in place of the
XOR name. `sync` with `dry_run=True` stores nothing and reports the version it
would create. `sync` refuses `delete=True` without `recursive=True`, and a
version that does not exist raises `VersionNotFound`.

The lower-level helpers are in `safecli.filesmap` (`get_base_paths`,
`get_metadata`, `gen_new_file_item`, `files_map_create`) and `safecli.dirwalk`
(`file_system_dir_walk`, `files_map_sync`).

`FakeVault()` with no argument uses `./fake_vault_data.json`. It loads that file
if it exists and writes its state back when the `with` block ends; `vault.save()`
does the same at any time.

### Coins

The fake vault also keeps coin balances, amounts being `Coins` with up to nine
decimal places:

```python
from safecli.fake_vault import FakeVault
from safecli.primitives import Coins, SecretKey

vault = FakeVault("fake_vault_data.json")
sk = SecretKey.random()
vault.allocate_test_coins(sk.public_key(), Coins.from_str("2.3"))
print(vault.get_balance_from_sk(sk))   # 2.3

other = SecretKey.random()
vault.create_balance(sk, other.public_key(), Coins.from_str("1.2"))
vault.safecoin_transfer_to_pk(other, sk.public_key(), 1, Coins.from_str("0.5"))
print(vault.get_transaction(1, sk.public_key(), sk))   # Success(0.5)
```

Spending more than a balance holds raises `NotEnoughBalance`. The vault also
offers sequential mutable data (`put_seq_mutable_data`, `seq_mutable_data_insert`,
`seq_mutable_data_get_value`, `seq_mutable_data_update`, `list_seq_mdata_entries`,
`mutable_data_delete`).

## Errors

Every failure raises a subclass of `safecli.errors.SafeError`, such as
`ContentNotFound`, `VersionNotFound`, `InvalidInput`, `NotEnoughBalance` or
`FilesSystemError`. `str()` of an error has the form `[Error] <Kind> - <details>`,
and two errors compare equal when they have the same class and message.

## What this package does not do

- It does not talk to a network: `FakeVault.connect` does nothing, and there is
  no authorisation of applications.
- Content is addressed by raw XOR names only. There are no `safe://` URLs, no
  name resolution and no generic fetch of content by URL.
- There is no command-line program; it is used as a library.