__all__ = ["OrderBatchConfig", "OrderConfig", "load_order_batch_config"]

from kraken_signer.config.orders import OrderBatchConfig, OrderConfig, load_order_batch_config
