"""Chain id → Fireblocks asset and default RPC endpoint.

One static table keyed by EVM chain id. ``get_network`` is the only
lookup; it never guesses an asset for an unknown chain.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum
from types import MappingProxyType
from typing import Mapping

from .exceptions import UnsupportedChainError


class ChainId(IntEnum):
    MAINNET = 1
    ROPSTEN = 3
    RINKEBY = 4
    GOERLI = 5
    OPTIMISM = 10
    FLARE = 14
    SONGBIRD = 19
    RSK = 30
    RSK_TEST = 31
    KOVAN = 42
    XDC = 50
    BSC = 56
    OPTIMISM_KOVAN = 69
    JOC = 81
    BSC_TEST = 97
    VELAS = 106
    HECO = 128
    POLYGON = 137
    SHIMMEREVM = 148
    OASYS = 248
    FANTOM = 250
    LACHAIN = 274
    ASTAR = 592
    POLYGON_ZKEVM = 1101
    MOONBEAM = 1284
    MOONRIVER = 1285
    POLYGON_ZKEVM_TEST = 1442
    SONEIUM_MINATO = 1946
    RONIN = 2020
    KAVA = 2222
    MANTLE = 5000
    MANTLE_TEST = 5001
    CANTO = 7700
    CANTO_TEST = 7701
    RISEOFTHEWARBOTSTESTNET = 7777
    BASE = 8453
    EVMOS = 9001
    SMARTBCH = 10000
    SMARTBCH_TEST = 10001
    HOLESKY = 17000
    ARBITRUM = 42161
    CELO = 42220
    AVALANCHE_TEST = 43113
    AVALANCHE = 43114
    CELO_ALF = 44787
    LINEA_TEST = 59140
    LINEA = 59144
    CELO_BAK = 62320
    POLYGON_TEST = 80001
    POLYGON_AMOY = 80002
    BLAST = 81457
    BASE_SEPOLIA = 84532
    IVAR = 88888
    ARBITRUM_RIN = 421611
    ARB_GOERLI = 421613
    ARBITRUM_SEPOLIA = 421614
    SEPOLIA = 11155111
    OPTIMISM_SEPOLIA = 11155420
    AURORA = 1313161554


@dataclass(frozen=True)
class Network:
    """Fireblocks asset id and default RPC for one chain."""
    chain_id: int
    name: str
    asset_id: str
    rpc_url: str

    def with_rpc_url(self, rpc_url: str) -> "Network":
        """Copy with a custom RPC endpoint."""
        return replace(self, rpc_url=rpc_url)


_C = ChainId

_TABLE = (
    (_C.MAINNET, "ETH", "https://cloudflare-eth.com"),
    (_C.ROPSTEN, "ETH_TEST", "https://rpc.ankr.com/eth_ropsten"),
    (_C.KOVAN, "ETH_TEST2", "https://kovan.poa.network"),
    (_C.GOERLI, "ETH_TEST3", "https://rpc.ankr.com/eth_goerli"),
    (_C.RINKEBY, "ETH_TEST4", "https://rpc.ankr.com/eth_rinkeby"),
    (_C.SEPOLIA, "ETH_TEST5", "https://rpc.sepolia.org"),
    (_C.HOLESKY, "ETH_TEST6", "https://ethereum-holesky-rpc.publicnode.com"),
    (_C.BSC, "BNB_BSC", "https://bsc-dataseed.binance.org"),
    (_C.BSC_TEST, "BNB_TEST", "https://data-seed-prebsc-1-s1.binance.org:8545"),
    (_C.POLYGON, "MATIC_POLYGON", "https://polygon-rpc.com"),
    (_C.POLYGON_TEST, "MATIC_POLYGON_MUMBAI", "https://rpc-mumbai.maticvigil.com"),
    (_C.POLYGON_AMOY, "AMOY_POLYGON_TEST", "https://rpc-amoy.polygon.technology"),
    (_C.AVALANCHE, "AVAX", "https://api.avax.network/ext/bc/C/rpc"),
    (_C.AVALANCHE_TEST, "AVAXTEST", "https://api.avax-test.network/ext/bc/C/rpc"),
    (_C.MOONRIVER, "MOVR_MOVR", "https://rpc.moonriver.moonbeam.network"),
    (_C.MOONBEAM, "GLMR_GLMR", "https://rpc.api.moonbeam.network"),
    (_C.SONGBIRD, "SGB", "https://songbird.towolabs.com/rpc"),
    (_C.ARBITRUM, "ETH-AETH", "https://rpc.ankr.com/arbitrum"),
    (_C.ARBITRUM_SEPOLIA, "ETH-AETH_SEPOLIA", "https://sepolia-rollup.arbitrum.io/rpc"),
    (_C.ARBITRUM_RIN, "ETH-AETH-RIN", "https://rinkeby.arbitrum.io/rpc"),
    (_C.ARB_GOERLI, "ETH-AETH_GOERLI", "https://endpoints.omniatech.io/v1/arbitrum/goerli/public"),
    (_C.FANTOM, "FTM_FANTOM", "https://rpc.ftm.tools/"),
    (_C.RSK, "RBTC", "https://public-node.rsk.co"),
    (_C.RSK_TEST, "RBTC_TEST", "https://public-node.testnet.rsk.co"),
    (_C.CELO, "CELO", "https://rpc.ankr.com/celo"),
    (_C.CELO_BAK, "CELO_BAK", "https://baklava-blockscout.celo-testnet.org/api/eth-rpc"),
    (_C.CELO_ALF, "CELO_ALF", "https://alfajores-forno.celo-testnet.org/api/eth-rpc"),
    (_C.OPTIMISM, "ETH-OPT", "https://rpc.ankr.com/optimism"),
    (_C.OPTIMISM_KOVAN, "ETH-OPT_KOV", "https://kovan.optimism.io/"),
    (_C.OPTIMISM_SEPOLIA, "ETH-OPT_SEPOLIA", "https://sepolia.optimism.io/"),
    (_C.RONIN, "RON", "https://api.roninchain.com/rpc"),
    (_C.CANTO, "CANTO", "https://canto.gravitychain.io"),
    (_C.CANTO_TEST, "CANTO_TEST", "https://testnet-archive.plexnode.wtf"),
    (_C.POLYGON_ZKEVM, "ETH_ZKEVM", "https://zkevm-rpc.com"),
    (_C.POLYGON_ZKEVM_TEST, "ETH_ZKEVM_TEST", "https://rpc.public.zkevm-test.net"),
    (_C.KAVA, "KAVA_KAVA", "https://evm.kava.io"),
    (_C.SMARTBCH, "SMARTBCH", "https://smartbch.greyh.at"),
    (_C.SMARTBCH_TEST, "ETHW", "https://rpc-testnet.smartbch.org"),
    (_C.HECO, "HT_CHAIN", "https://http-mainnet.hecochain.com"),
    (_C.AURORA, "AURORA_DEV", "https://mainnet.aurora.dev"),
    (_C.RISEOFTHEWARBOTSTESTNET, "TKX", "https://testnet1.rotw.games"),
    (_C.EVMOS, "EVMOS", "https://eth.bd.evmos.org"),
    (_C.ASTAR, "ASTR_ASTR", "https://evm.astar.network"),
    (_C.VELAS, "VLX_VLX", "https://evmexplorer.velas.com/rpc"),
    (_C.XDC, "XDC", "https://rpc.xdcrpc.com"),
    (_C.BASE, "BASECHAIN_ETH", "https://mainnet.base.org"),
    (_C.BASE_SEPOLIA, "BASECHAIN_ETH_TEST5", "https://sepolia.base.org"),
    (_C.IVAR, "CHZ_CHZ2", "https://mainnet-rpc.ivarex.com"),
    (_C.JOC, "ASTR_TEST", "https://rpc-1.japanopenchain.org:8545"),
    (_C.OASYS, "OAS", "https://oasys.blockpi.network/v1/rpc/public"),
    (_C.SHIMMEREVM, "SMR_SMR", "https://json-rpc.evm.shimmer.network"),
    (_C.LINEA, "LINEA", "https://rpc.linea.build"),
    (_C.LINEA_TEST, "LINEA_TEST", "https://rpc.goerli.linea.build"),
    (_C.FLARE, "FLR", "https://flare-api.flare.network/ext/C/rpc"),
    (_C.MANTLE, "MANTLE", "https://rpc.mantle.xyz"),
    (_C.MANTLE_TEST, "MANTLE_TEST", "https://rpc.testnet.mantle.xyz"),
    (_C.BLAST, "BLAST", "https://rpc.ankr.com/blast"),
    (_C.SONEIUM_MINATO, "SONEIUM_MINATO_TEST", "https://rpc.minato.soneium.org/"),
    (_C.LACHAIN, "LAC", "https://rpc1.mainnet.lachain.network"),
)

NETWORKS: Mapping[int, Network] = MappingProxyType({
    int(chain): Network(
        chain_id=int(chain),
        name=chain.name.lower(),
        asset_id=asset_id,
        rpc_url=rpc_url,
    )
    for chain, asset_id, rpc_url in _TABLE
})


def get_network(chain_id: int) -> Network:
    """Look up the network record for ``chain_id``.

    Raises:
        UnsupportedChainError: If the chain is not in the table
    """
    try:
        return NETWORKS[int(chain_id)]
    except KeyError:
        raise UnsupportedChainError(int(chain_id)) from None


def is_supported_chain(chain_id: int) -> bool:
    return int(chain_id) in NETWORKS
