"""Pydantic schemas for the backup service's asset listing and detail endpoints."""

from typing import List

from pydantic import BaseModel, Field, field_validator

from common.types import Asset, AssetGroup, AssetID, ChunkReference


class AssetIDSchema(BaseModel):
    """One entry of an asset group listing."""
    id: str
    size: int = Field(ge=0)

    def to_domain(self) -> AssetID:
        return AssetID(id=self.id, size=self.size)


class AssetGroupSchema(BaseModel):
    """Assets of one backup domain."""
    domain: str
    assets: List[AssetIDSchema] = Field(default_factory=list)

    def to_domain(self) -> AssetGroup:
        return AssetGroup(
            domain=self.domain,
            asset_ids=tuple(asset.to_domain() for asset in self.assets)
        )


class AssetGroupsResponse(BaseModel):
    """Response model for a snapshot's asset group listing."""
    snapshot_id: str
    asset_groups: List[AssetGroupSchema]


class ChunkReferenceSchema(BaseModel):
    """Chunk location; checksum is hex encoded on the wire."""
    checksum: str
    size: int = Field(ge=0)
    url: str

    @field_validator('checksum')
    @classmethod
    def checksum_must_be_hex(cls, value: str) -> str:
        if not value:
            raise ValueError("checksum must not be empty")
        try:
            bytes.fromhex(value)
        except ValueError as e:
            raise ValueError(f"checksum is not hex encoded: {value!r}") from e
        return value.lower()

    def to_domain(self) -> ChunkReference:
        return ChunkReference(
            checksum=bytes.fromhex(self.checksum),
            size=self.size,
            url=self.url
        )


class AssetSchema(BaseModel):
    """Asset details returned by the asset query."""
    id: str
    size: int = Field(ge=0)
    domain: str
    relative_path: str
    chunks: List[ChunkReferenceSchema] = Field(default_factory=list)

    def to_domain(self) -> Asset:
        return Asset(
            asset_id=AssetID(id=self.id, size=self.size),
            domain=self.domain,
            relative_path=self.relative_path,
            size=self.size,
            chunks=tuple(chunk.to_domain() for chunk in self.chunks)
        )


class AssetsQueryRequest(BaseModel):
    """Request model for fetching asset details."""
    asset_ids: List[str]


class AssetsQueryResponse(BaseModel):
    """Response model for fetching asset details."""
    assets: List[AssetSchema]
