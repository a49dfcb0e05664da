import os

from fastapi import FastAPI, HTTPException, Request, Response
from pydantic import BaseModel, Field

from paillier_bigint.errors import NoInverseError
from paillier_bigint.paillier import KeyPair, generate_random_keys_sync


# ── Configuration ──────────────────────────────────
DEMO_KEY_ID = "key-v1"
DEMO_KEY_BITS = int(os.getenv("PAILLIER_DEMO_KEY_BITS", "1024"))

app = FastAPI(
    title="Paillier Demo API",
    version="0.1.0",
)


# ── Security: HTTP headers ───────────────────────────────────
@app.middleware("http")
async def security_headers(request: Request, call_next):
    response: Response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Cache-Control"] = "no-store"
    return response


# Simple variant so that random factors stay recoverable server-side
_DEMO_KEYS = generate_random_keys_sync(DEMO_KEY_BITS, simple_variant=True)


def get_demo_keypair() -> KeyPair:
    return _DEMO_KEYS


def _parse_int(value: str, field: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"{field} must be a decimal integer") from exc


class EncryptRequest(BaseModel):
    plaintext: int = Field(ge=0)


class AggregateRequest(BaseModel):
    ciphertexts: list[str] = Field(min_length=1)


class PlaintextAddRequest(BaseModel):
    ciphertext: str = Field(min_length=1)
    plaintexts: list[int] = Field(min_length=1)


class MultiplyRequest(BaseModel):
    ciphertext: str = Field(min_length=1)
    k: int


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@app.get("/crypto/pubkey")
async def get_public_key():
    """Return the demo Paillier public key for client-side encryption."""
    pub, _ = get_demo_keypair()
    return {
        "key_id": DEMO_KEY_ID,
        "n": str(pub.n),
        "g": str(pub.g),
        "bit_length": pub.bit_length,
    }


@app.post("/crypto/encrypt")
async def encrypt_plaintext(payload: EncryptRequest):
    """Encrypt a plaintext with the demo public key (server-side fallback)."""
    pub, _ = get_demo_keypair()
    if payload.plaintext >= pub.n:
        raise HTTPException(status_code=400, detail="plaintext must be lower than n")
    return {
        "key_id": DEMO_KEY_ID,
        "plaintext": payload.plaintext,
        "ciphertext": str(pub.encrypt(payload.plaintext)),
    }


@app.post("/crypto/aggregate")
async def aggregate(payload: AggregateRequest):
    """Homomorphic sum of the given ciphertexts, with its decrypted total (demo)."""
    pub, priv = get_demo_keypair()
    ciphertexts = [_parse_int(c, "ciphertexts") for c in payload.ciphertexts]
    agg = pub.addition(*ciphertexts)
    return {
        "key_id": DEMO_KEY_ID,
        "count": len(ciphertexts),
        "aggregate_ciphertext": str(agg),
        "total": str(priv.decrypt(agg)),
    }


@app.post("/crypto/plaintext-add")
async def plaintext_add(payload: PlaintextAddRequest):
    pub, _ = get_demo_keypair()
    ciphertext = _parse_int(payload.ciphertext, "ciphertext")
    return {
        "key_id": DEMO_KEY_ID,
        "ciphertext": str(pub.plaintext_addition(ciphertext, *payload.plaintexts)),
    }


@app.post("/crypto/multiply")
async def multiply(payload: MultiplyRequest):
    pub, _ = get_demo_keypair()
    ciphertext = _parse_int(payload.ciphertext, "ciphertext")
    try:
        product = pub.multiply(ciphertext, payload.k)
    except NoInverseError as exc:
        raise HTTPException(status_code=400, detail="ciphertext is not invertible modulo n^2") from exc
    return {
        "key_id": DEMO_KEY_ID,
        "ciphertext": str(product),
    }
