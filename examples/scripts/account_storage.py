# Bound names: trie, data, hashing, Buffer.
# Fills System.Account style storage slots for ten generated accounts.

pallet = hashing.twox_128("System")
storage = hashing.twox_128("Account")

for i in range(10):
    pubkey = hashing.blake2_256(i)
    pubkey_hash = hashing.blake2_128(pubkey)
    slot = Buffer.concat([
        pallet,
        storage,
        pubkey_hash,
        pubkey,
    ])
    trie.insert(slot, "0xeeee")
