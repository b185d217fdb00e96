#!/usr/bin/env python3
"""
hello_token.py - Your First DSWT Token

Issue a token, send it over the wire as a string, and verify it on the
other side with the same key.

Run: python hello_token.py
"""

from dswt import MalformedToken, TokenManager, parse

# 1. Create a manager with a freshly generated 256-bit key
manager, key = TokenManager.generate()
print(f"🔑 Generated key with id: {manager.key_id}")

# 2. Issue a token (values may be str, int, float, bool or UUID)
token = manager.issue({"sub": "alice", "role": "admin", "level": 3})
wire = token.to_wire()

print(f"\n✅ Issued payload: {token.claims()}")
print(f"📝 Token: {wire}")

# 3. Parse and verify on the receiving side
received = parse(wire)
print("\n🔍 Verification result:")
print(f"   Valid with the right key: {TokenManager(key).verify(received)}")
print(f"   Valid with another key:   {TokenManager(b'some-other-key').verify(received)}")

# 4. Malformed input is an error, not a failed verification
try:
    parse("not;a-token")
except MalformedToken as e:
    print(f"\n⚠️  {e}")
