# OPSBOARD/opsboard/services/storage.py : stockage d'objets (images d'inventaire, photos de livraison)

import logging
import os
import uuid
from pathlib import Path
from typing import Optional

import boto3

from opsboard.config import get_storage_config

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/heic": "heic",
    "image/heif": "heif",
}


def validate_image(data: bytes, content_type: Optional[str], max_size: int) -> str:
    """Vérifie type et taille; retourne l'extension à utiliser"""
    content_type = (content_type or "").strip().lower()
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise ValueError("Le fichier doit être une image")
    if not data:
        raise ValueError("Fichier vide")
    if len(data) > max_size:
        raise ValueError(f"L'image doit faire moins de {max_size // (1024 * 1024)} Mo")
    return ALLOWED_IMAGE_TYPES[content_type]


class LocalStorage:
    """Fichiers écrits sous UPLOAD_DIR/<bucket>/ et servis sous UPLOAD_URL_PREFIX"""

    def __init__(self, upload_dir: Path, url_prefix: str):
        self.upload_dir = Path(upload_dir)
        self.url_prefix = url_prefix.rstrip("/")

    def upload(self, bucket: str, filename: str, data: bytes, content_type: str) -> str:
        target_dir = self.upload_dir / bucket
        target_dir.mkdir(parents=True, exist_ok=True)
        (target_dir / filename).write_bytes(data)
        logger.info(f"Fichier stocké: {bucket}/{filename} ({len(data)} octets)")
        return self.public_url(bucket, filename)

    def public_url(self, bucket: str, filename: str) -> str:
        return f"{self.url_prefix}/{bucket}/{filename}"


class S3Storage:
    """Objets stockés dans un bucket S3 unique, préfixés par le nom logique du bucket"""

    def __init__(self, aws_config: dict):
        self.bucket_name = aws_config["bucket_name"]
        self.base_url = aws_config.get("public_url") or (
            f"https://{self.bucket_name}.s3.{aws_config['region']}.amazonaws.com"
        )
        self.client = boto3.client(
            "s3",
            aws_access_key_id=aws_config["access_key_id"],
            aws_secret_access_key=aws_config["secret_access_key"],
            region_name=aws_config["region"]
        )

    def upload(self, bucket: str, filename: str, data: bytes, content_type: str) -> str:
        key = f"{bucket}/{filename}"
        self.client.put_object(
            Bucket=self.bucket_name,
            Key=key,
            Body=data,
            ContentType=content_type
        )
        logger.info(f"Uploadé vers s3://{self.bucket_name}/{key}")
        return self.public_url(bucket, filename)

    def public_url(self, bucket: str, filename: str) -> str:
        return f"{self.base_url.rstrip('/')}/{bucket}/{filename}"


_storage = None


def get_storage():
    """Backend de stockage configuré (instancié une seule fois)"""
    global _storage
    if _storage is None:
        config = get_storage_config()
        if config["backend"] == "s3":
            if not config["aws"]["enabled"]:
                raise RuntimeError("STORAGE_BACKEND=s3 mais la configuration AWS est incomplète")
            _storage = S3Storage(config["aws"])
        else:
            _storage = LocalStorage(config["upload_dir"], config["url_prefix"])
    return _storage


def store_image(bucket: str, prefix: str, data: bytes, content_type: Optional[str]) -> str:
    """Valide et stocke une image; retourne son URL publique"""
    config = get_storage_config()
    ext = validate_image(data, content_type, config["max_size"])
    filename = f"{prefix}_{uuid.uuid4().hex}.{ext}"
    return get_storage().upload(bucket, filename, data, content_type.strip().lower())


def local_upload_root() -> str:
    """Dossier servi en statique quand le stockage est local"""
    config = get_storage_config()
    os.makedirs(config["upload_dir"], exist_ok=True)
    return str(config["upload_dir"])
