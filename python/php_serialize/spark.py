"""
PySpark UDF helpers for PHP unserialization.

This module provides ready-to-use UDFs that turn a column of PHP serialized
data into JSON strings, which Spark can then parse with ``from_json``.

Example:
    >>> from php_serialize.spark import php_unserialize_udf
    >>> unserialize = php_unserialize_udf()
    >>> df = df.withColumn("parsed", unserialize("serialized_col"))
"""

from typing import TYPE_CHECKING, Callable, Literal, Optional, Union

if TYPE_CHECKING:
    from pyspark.sql import Column, SparkSession

# Lazy imports to avoid requiring PySpark at import time
_pyspark_available: Optional[bool] = None


def _check_pyspark() -> None:
    """Check if PySpark is available."""
    global _pyspark_available
    if _pyspark_available is None:
        try:
            import pyspark  # noqa: F401
            _pyspark_available = True
        except ImportError:
            _pyspark_available = False

    if not _pyspark_available:
        raise ImportError(
            "PySpark is required for spark module. "
            "Install with: pip install php-serialize-codec[spark]"
        )


def to_json_or_none(
    data: Optional[Union[bytes, str]],
    errors: Literal["strict", "replace", "bytes"] = "replace",
) -> Optional[str]:
    """Unserialize one cell to JSON, returning None for null or undecodable cells."""
    from php_serialize import PhpSerializeError, loads_json

    if data is None:
        return None
    try:
        return loads_json(data, errors=errors)
    except (PhpSerializeError, ValueError, TypeError):
        return None


def php_unserialize_udf(
    output_format: Literal["json"] = "json",
    errors: Literal["strict", "replace", "bytes"] = "replace",
) -> Callable[["Column"], "Column"]:
    """
    Create a PySpark UDF for unserializing PHP serialized data.

    Args:
        output_format: Output format; only "json" is supported because Spark
            cannot hold arbitrary Python objects
        errors: Error handling mode for strings that are not valid UTF-8

    Returns:
        A UDF function that can be applied to DataFrame columns

    Example:
        >>> from php_serialize.spark import php_unserialize_udf
        >>> from pyspark.sql import functions as F
        >>>
        >>> unserialize = php_unserialize_udf()
        >>> df = df.withColumn("parsed", unserialize(F.col("php_data")))
        >>>
        >>> # Or with schema inference
        >>> from pyspark.sql.functions import from_json, schema_of_json
        >>> schema = schema_of_json('{"name":"Alice","age":30}')
        >>> df = df.withColumn("parsed", from_json(unserialize("php_data"), schema))
    """
    if output_format != "json":
        raise ValueError(f"Unsupported output format: {output_format!r}")
    _check_pyspark()

    from pyspark.sql.functions import udf
    from pyspark.sql.types import StringType

    @udf(returnType=StringType())
    def _unserialize(data: Optional[Union[bytes, str]]) -> Optional[str]:
        return to_json_or_none(data, errors)

    return _unserialize


def php_unserialize_pandas_udf(
    errors: Literal["strict", "replace", "bytes"] = "replace",
) -> Callable:
    """
    Create a Pandas UDF for batch PHP unserialization.

    This is more efficient than the regular UDF for large datasets
    as it processes data in batches.

    Args:
        errors: Error handling mode for strings that are not valid UTF-8

    Returns:
        A Pandas UDF function
    """
    _check_pyspark()

    from pyspark.sql.functions import pandas_udf
    from pyspark.sql.types import StringType

    import pandas as pd

    @pandas_udf(StringType())
    def _unserialize_batch(series: pd.Series) -> pd.Series:
        def safe_unserialize(data: Optional[Union[bytes, str, float]]) -> Optional[str]:
            if isinstance(data, float) and pd.isna(data):
                return None
            return to_json_or_none(data, errors)

        return series.apply(safe_unserialize)

    return _unserialize_batch


def register_udfs(spark: "SparkSession", prefix: str = "php_") -> None:
    """
    Register PHP unserialization UDFs with a Spark session.

    Args:
        spark: SparkSession instance
        prefix: Prefix for UDF names (default: "php_")

    Example:
        >>> from pyspark.sql import SparkSession
        >>> from php_serialize.spark import register_udfs
        >>>
        >>> spark = SparkSession.builder.getOrCreate()
        >>> register_udfs(spark)
        >>>
        >>> spark.sql("SELECT php_unserialize(data) FROM table")
    """
    _check_pyspark()

    from pyspark.sql.types import StringType

    spark.udf.register(f"{prefix}unserialize", to_json_or_none, StringType())
