"""Weak or broken cryptographic algorithms and parameters."""

import re

from ..models import Severity
from ..suppression import ContextWindow, NumericThreshold
from .base import JS_MODULE_FILES, PatternSpec, Rule

SECURITY_KEYWORDS = (
    "password", "token", "secret", "key", "salt", "nonce", "iv", "crypto", "session", "auth",
)

BCRYPT_SAFE_ROUNDS = 10
PBKDF2_SAFE_ITERATIONS = 100_000


class WeakCryptoRule(Rule):
    id = "weak-crypto"
    name = "Weak Cryptography"
    description = "Detects use of weak or broken cryptographic algorithms"
    severity = Severity.high
    tags = ["security", "cryptography", "hashing"]
    file_pattern = JS_MODULE_FILES

    patterns = [
        PatternSpec(
            name="MD5 usage",
            pattern=re.compile(
                r"""createHash\s*\(\s*['"`]md5['"`]\s*\)|\.update\(['"`]md5['"`]\)|md5\s*\(""",
                re.IGNORECASE,
            ),
            message="MD5 is cryptographically broken and should not be used",
            explanation="""MD5 is cryptographically broken and should never be used for security purposes:

- Collision attacks: different inputs can produce the same MD5 hash
- Fast computation: modern hardware computes billions of MD5 hashes per second
- Rainbow tables: pre-computed tables exist for cracking MD5 hashes

Using MD5 for passwords, signatures, or any security-critical hashing is dangerous.""",
            fix="""// [BAD] MD5
const hash = crypto.createHash('md5').update(password).digest('hex');

// [GOOD] Passwords: bcrypt, scrypt or Argon2
const hash = await bcrypt.hash(password, 12);

// [GOOD] General hashing: SHA-256 or SHA-512
const hash = crypto.createHash('sha256').update(data).digest('hex');""",
        ),
        PatternSpec(
            name="SHA1 usage",
            pattern=re.compile(r"""createHash\s*\(\s*['"`]sha1['"`]\s*\)|sha1\s*\(""", re.IGNORECASE),
            message="SHA1 is cryptographically weak and should not be used",
            explanation="""SHA1 is cryptographically weak and deprecated:

- Practical collision attacks were demonstrated in 2017
- No longer trusted for TLS certificates by major browsers
- Still far too fast for password hashing""",
            fix="""// [BAD] SHA1
const hash = crypto.createHash('sha1').update(data).digest('hex');

// [GOOD] SHA-256 or better
const hash = crypto.createHash('sha256').update(data).digest('hex');""",
        ),
        PatternSpec(
            name="DES/3DES encryption",
            pattern=re.compile(
                r"""createCipher(?:iv)?\s*\(\s*['"`](?:des|des-ede|des-ede3|des3)['"`]""", re.IGNORECASE
            ),
            message="DES/3DES encryption is obsolete and insecure",
            explanation="""DES and 3DES are obsolete encryption algorithms:

- DES uses 56-bit keys that can be brute-forced in hours
- NIST deprecated 3DES in 2023
- 64-bit blocks are vulnerable to birthday attacks""",
            fix="""// [GOOD] AES-256-GCM (authenticated encryption)
const key = crypto.randomBytes(32);
const iv = crypto.randomBytes(12);
const cipher = crypto.createCipheriv('aes-256-gcm', key, iv);""",
        ),
        PatternSpec(
            name="ECB mode",
            pattern=re.compile(r"""createCipher(?:iv)?\s*\(\s*['"`][^'"`]*-ecb[^'"`]*['"`]""", re.IGNORECASE),
            message="ECB mode is insecure (leaks patterns in encrypted data)",
            explanation="""ECB (Electronic Codebook) mode is fundamentally insecure:

- Identical plaintext blocks produce identical ciphertext blocks
- The same input always produces the same output
- It provides no integrity protection""",
            fix="""// [GOOD] Use GCM with a random IV for every encryption
const iv = crypto.randomBytes(12);
const cipher = crypto.createCipheriv('aes-256-gcm', key, iv);""",
        ),
        PatternSpec(
            name="Weak random - Math.random()",
            pattern=re.compile(r"Math\.random\s*\(\s*\)"),
            message="Math.random() is not cryptographically secure",
            explanation="""Math.random() is NOT cryptographically secure:

- It uses a deterministic pseudorandom generator whose state can be recovered
- It must not be used for tokens, keys, salts, IVs or session ids

For security purposes use crypto.randomBytes() or crypto.getRandomValues().""",
            fix="""// [BAD] Math.random() for security values
const token = Math.random().toString(36).substring(7);

// [GOOD] Node.js
const token = crypto.randomBytes(32).toString('hex');

// [GOOD] Browser
const array = new Uint8Array(32);
crypto.getRandomValues(array);""",
            severity=Severity.medium,
            suppressor=ContextWindow(SECURITY_KEYWORDS, window=100),
        ),
        PatternSpec(
            name="Unsalted hash",
            pattern=re.compile(
                r"(?:createHash|bcrypt|scrypt)\s*\([^)]*\)\.update\s*\(\s*password\s*\)\.digest", re.IGNORECASE
            ),
            message="Password hashing without salt is vulnerable to rainbow tables",
            explanation="""Hashing passwords without a salt is vulnerable to:

- Rainbow tables of pre-computed hashes for common passwords
- Identical hashes for identical passwords
- Attacking all stored hashes in parallel""",
            fix="""// [GOOD] bcrypt salts automatically
const hash = await bcrypt.hash(password, 12);

// [GOOD] scrypt with a random salt
const salt = crypto.randomBytes(16);
const hash = crypto.scryptSync(password, salt, 64);""",
        ),
        PatternSpec(
            name="Low bcrypt rounds",
            pattern=re.compile(r"bcrypt\.hash(?:Sync)?\s*\([^,]+,\s*(?P<rounds>[0-9]+)", re.IGNORECASE),
            message=f"Bcrypt rounds too low ($rounds, minimum {BCRYPT_SAFE_ROUNDS})",
            explanation="""Bcrypt rounds (cost factor) determine how expensive each hash is:

- Below 10 rounds hashes are fast to crack with modern GPUs
- 12 rounds is the recommended minimum today
- Every extra round doubles the work""",
            fix="""// [BAD] Low rounds
const hash = await bcrypt.hash(password, $rounds);

// [GOOD] At least 12 rounds
const hash = await bcrypt.hash(password, 12);""",
            severity=Severity.medium,
            suppressor=NumericThreshold("rounds", BCRYPT_SAFE_ROUNDS),
        ),
        PatternSpec(
            name="Weak PBKDF2 iterations",
            pattern=re.compile(r"pbkdf2(?:Sync)?\s*\([^,]+,[^,]+,\s*(?P<iterations>[0-9]+)", re.IGNORECASE),
            message=f"PBKDF2 iterations too low ($iterations, minimum {PBKDF2_SAFE_ITERATIONS})",
            explanation="""PBKDF2 iterations determine brute-force resistance:

- Fewer than 100,000 iterations is vulnerable to GPU-accelerated attacks
- OWASP recommends 600,000 iterations for PBKDF2-HMAC-SHA256""",
            fix="""// [GOOD] OWASP recommended iteration count
const hash = crypto.pbkdf2Sync(password, salt, 600000, 64, 'sha256');

// [GOOD] Or prefer Argon2
const hash = await argon2.hash(password);""",
            severity=Severity.medium,
            suppressor=NumericThreshold("iterations", PBKDF2_SAFE_ITERATIONS),
        ),
        PatternSpec(
            name="Hardcoded IV/Salt",
            pattern=re.compile(r"""(?:const|let|var)\s+(?:iv|salt)\s*=\s*['"`][a-fA-F0-9]{16,}['"`]""", re.IGNORECASE),
            message="Hardcoded IV or salt defeats encryption security",
            explanation="""Hardcoded initialization vectors or salts defeat encryption:

- The same input always produces the same ciphertext or hash
- Attackers can detect repeated values
- One leaked value compromises every user""",
            fix="""// [GOOD] Generate a fresh IV or salt for every operation
const iv = crypto.randomBytes(16);
const salt = crypto.randomBytes(16);""",
        ),
    ]
