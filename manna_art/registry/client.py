"""
IP registry integration (Story Protocol).

Registers artworks as IP assets: mints an NFT in an SPG collection, registers
it as an IP asset and attaches license terms in one transaction. Derivatives
are minted and linked to a parent asset under the parent's license terms.

The SDK and web3 are an optional install (``manna-art[chain]``) and are only
imported when the first on-chain call is made.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import structlog

from ..config import Settings
from ..errors import ConfigurationError, OnChainRegistrationFailed

logger = structlog.get_logger(__name__)

ZERO_ADDRESS = "0x" + "0" * 40
ZERO_HASH = "0x" + "0" * 64

# Public SPG NFT collection on Story mainnet, used when SPG_NFT_CONTRACT is unset
PUBLIC_SPG_NFT_CONTRACT = "0x6Cfa03Bc64B1a76206d0Ea10baDed31D520449F5"

# Derivative registration cap on royalty tokens
MAX_ROYALTY_TOKENS = 100_000_000

NOT_AUTHORIZED_TO_MINT = "Workflow__CallerNotAuthorizedToMint"


@dataclass(frozen=True)
class IPRegistration:
    """Identifiers returned by a successful on-chain registration."""

    ip_id: str
    token_id: str
    tx_hash: str
    license_terms_ids: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class CollectionResult:
    contract_address: str
    tx_hash: str


class IPRegistry(ABC):
    """Abstract base class for the IP registration protocol."""

    @abstractmethod
    async def mint_and_register(
        self,
        metadata_uri: str,
        recipient: str,
        license_fee: int,
        commercial_rev_share: int,
    ) -> IPRegistration:
        """Mint an NFT, register it as an IP asset and attach license terms.

        Raises:
            OnChainRegistrationFailed: If the transaction could not be completed
        """
        pass

    @abstractmethod
    async def register_derivative(
        self,
        parent_ip_id: str,
        parent_license_terms_ids: List[str],
        recipient: str,
        metadata_uri: str,
        license_fee: int,
        commercial_rev_share: int,
    ) -> IPRegistration:
        """Mint and register an IP asset linked to a parent's license terms.

        ``license_fee`` caps the minting fee paid to the parent (0 means no cap)
        and ``commercial_rev_share`` caps the parent's revenue share percentage.

        Raises:
            OnChainRegistrationFailed: If the transaction could not be completed
        """
        pass

    @abstractmethod
    async def create_collection(
        self,
        name: str,
        symbol: str,
        is_public_minting: bool = False,
        mint_fee_recipient: Optional[str] = None,
    ) -> CollectionResult:
        """Create an SPG NFT collection owned by the server wallet."""
        pass


def commercial_remix_terms(
    minting_fee: int, commercial_rev_share: int, currency: str, royalty_policy: str
) -> Dict[str, Any]:
    """PIL "commercial remix" terms: commercial use and derivatives allowed,
    attribution required, reciprocal, no approval needed."""
    return {
        "transferable": True,
        "royalty_policy": royalty_policy,
        "default_minting_fee": minting_fee,
        "expiration": 0,
        "commercial_use": True,
        "commercial_attribution": True,
        "commercializer_checker": ZERO_ADDRESS,
        "commercializer_checker_data": ZERO_ADDRESS,
        "commercial_rev_share": commercial_rev_share,
        "commercial_rev_ceiling": 0,
        "derivatives_allowed": True,
        "derivatives_attribution": True,
        "derivatives_approval": False,
        "derivatives_reciprocal": True,
        "derivative_rev_ceiling": 0,
        "currency": currency,
        "uri": "",
    }


def licensing_config(minting_fee: int, commercial_rev_share: int) -> Dict[str, Any]:
    return {
        "is_set": True,
        "minting_fee": minting_fee,
        "licensing_hook": ZERO_ADDRESS,
        "hook_data": ZERO_ADDRESS,
        "commercial_rev_share": commercial_rev_share,
        "disabled": False,
        "expect_minimum_group_reward_share": 0,
        "expect_group_reward_pool": ZERO_ADDRESS,
    }


def ip_metadata(metadata_uri: str) -> Dict[str, str]:
    """The same document serves as IP and NFT metadata."""
    return {
        "ip_metadata_uri": metadata_uri,
        "ip_metadata_hash": ZERO_HASH,
        "nft_metadata_uri": metadata_uri,
        "nft_metadata_hash": ZERO_HASH,
    }


class StoryIPRegistry(IPRegistry):
    """IP registry backed by the Story Protocol Python SDK."""

    def __init__(self, settings: Settings, client: Optional[Any] = None):
        self.settings = settings
        self._client = client
        self._wallet_address: Optional[str] = None

    @property
    def spg_nft_contract(self) -> str:
        return self.settings.spg_nft_contract or PUBLIC_SPG_NFT_CONTRACT

    @property
    def uses_custom_spg(self) -> bool:
        return bool(self.settings.spg_nft_contract)

    @property
    def client(self) -> Any:
        if self._client is None:
            private_key = self.settings.story_wallet_private_key
            if not private_key:
                raise ConfigurationError("STORY_WALLET_PRIVATE_KEY no está configurada")
            if not private_key.startswith("0x"):
                private_key = f"0x{private_key}"

            from story_protocol_python_sdk import StoryClient
            from web3 import Web3

            web3 = Web3(Web3.HTTPProvider(self.settings.story_rpc_url))
            account = web3.eth.account.from_key(private_key)
            self._wallet_address = account.address
            self._client = StoryClient(web3, account, self.settings.story_chain_id)
        return self._client

    @property
    def wallet_address(self) -> Optional[str]:
        """Server wallet address; builds the client if needed."""
        if self._wallet_address is None:
            self.client
        return self._wallet_address

    def _translate(self, error: Exception) -> OnChainRegistrationFailed:
        if NOT_AUTHORIZED_TO_MINT in str(error):
            logger.error(
                "Server wallet not authorized to mint",
                wallet=self._wallet_address,
                spg_nft_contract=self.spg_nft_contract,
                custom_spg=self.uses_custom_spg,
            )
            hint = (
                "Autoriza la wallet en tu SPG personalizado"
                if self.uses_custom_spg
                else "Considera crear tu propio SPG para tener control total"
            )
            return OnChainRegistrationFailed(f"Wallet no autorizada para mintear. {hint}.")
        return OnChainRegistrationFailed(f"Error en Story Protocol: {error}")

    async def _call(self, fn, *args, **kwargs) -> Dict[str, Any]:
        try:
            return await asyncio.to_thread(fn, *args, **kwargs)
        except ConfigurationError:
            raise
        except Exception as e:
            raise self._translate(e) from e

    async def mint_and_register(
        self,
        metadata_uri: str,
        recipient: str,
        license_fee: int,
        commercial_rev_share: int,
    ) -> IPRegistration:
        logger.info(
            "Minting and registering IP",
            spg_nft_contract=self.spg_nft_contract,
            custom_spg=self.uses_custom_spg,
            recipient=recipient,
            license_fee=license_fee,
            commercial_rev_share=commercial_rev_share,
        )
        client = self.client
        response = await self._call(
            client.IPAsset.mint_and_register_ip_asset_with_pil_terms,
            spg_nft_contract=self.spg_nft_contract,
            terms=[
                {
                    "terms": commercial_remix_terms(
                        license_fee,
                        commercial_rev_share,
                        self.settings.ip_token_address,
                        self.settings.royalty_policy_address,
                    ),
                    "licensing_config": licensing_config(license_fee, commercial_rev_share),
                }
            ],
            ip_metadata=ip_metadata(metadata_uri),
            recipient=recipient,
        )
        return IPRegistration(
            ip_id=response.get("ip_id") or "",
            token_id=str(response.get("token_id") or ""),
            tx_hash=str(response.get("tx_hash") or ""),
            license_terms_ids=[str(t) for t in response.get("license_terms_ids") or []],
        )

    async def register_derivative(
        self,
        parent_ip_id: str,
        parent_license_terms_ids: List[str],
        recipient: str,
        metadata_uri: str,
        license_fee: int,
        commercial_rev_share: int,
    ) -> IPRegistration:
        logger.info(
            "Registering derivative IP",
            parent_ip_id=parent_ip_id,
            parent_license_terms_ids=parent_license_terms_ids,
            recipient=recipient,
            license_fee=license_fee,
            commercial_rev_share=commercial_rev_share,
        )
        client = self.client
        response = await self._call(
            client.IPAsset.mint_and_register_ip_and_make_derivative,
            spg_nft_contract=self.spg_nft_contract,
            deriv_data={
                "parent_ip_ids": [parent_ip_id],
                "license_terms_ids": [int(t) for t in parent_license_terms_ids],
                "max_minting_fee": license_fee,
                "max_rts": MAX_ROYALTY_TOKENS,
                "max_revenue_share": commercial_rev_share,
            },
            ip_metadata=ip_metadata(metadata_uri),
            recipient=recipient,
        )
        return IPRegistration(
            ip_id=response.get("ip_id") or "",
            token_id=str(response.get("token_id") or ""),
            tx_hash=str(response.get("tx_hash") or ""),
            license_terms_ids=list(parent_license_terms_ids),
        )

    async def create_collection(
        self,
        name: str,
        symbol: str,
        is_public_minting: bool = False,
        mint_fee_recipient: Optional[str] = None,
    ) -> CollectionResult:
        client = self.client
        owner = self.wallet_address
        logger.info("Creating SPG NFT collection", name=name, symbol=symbol, owner=owner)
        response = await self._call(
            client.NFTClient.create_nft_collection,
            name=name,
            symbol=symbol,
            is_public_minting=is_public_minting,
            mint_open=True,
            mint_fee_recipient=mint_fee_recipient or ZERO_ADDRESS,
            contract_uri="",
            owner=owner,
        )
        result = CollectionResult(
            contract_address=response.get("nft_contract") or "",
            tx_hash=str(response.get("tx_hash") or ""),
        )
        logger.info(
            "SPG NFT collection created",
            contract_address=result.contract_address,
            tx_hash=result.tx_hash,
        )
        return result
