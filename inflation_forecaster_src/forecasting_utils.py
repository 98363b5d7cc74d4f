# inflation_forecaster_src/forecasting_utils.py

import numpy as np
import pandas as pd
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple
from tqdm.auto import tqdm
import logging

import statsmodels.api as sm
from scipy import stats

from helpers.temporal import is_contiguous_monthly
from .exceptions import EvaluationError, FitError

logger = logging.getLogger(__name__)

TARGET = "dinfl12"
BASE_REGRESSOR = "dinfl"
LAG_RANGE = range(12, 24)
ENSEMBLE_NAME = "ensem"

# Model name -> alternating predictor block
PREDICTORS: Dict[str, str] = {
    "mUN": "unrate",
    "mEXPINF": "expinf1yr",
    "mMICH": "mich",
    "mINDPRO": "indpro",
}


class FittedRegression(ABC):
    """A fitted linear regression as seen by the pipeline."""

    @property
    @abstractmethod
    def params(self) -> pd.Series:
        """Coefficients indexed by regressor name."""

    @property
    @abstractmethod
    def residuals(self) -> pd.Series:
        """In-sample residuals indexed like the training rows."""

    @abstractmethod
    def predict(self, X: pd.DataFrame) -> pd.Series:
        pass

    def predict_interval(self, X: pd.DataFrame, level: float = 95.0) -> pd.DataFrame:
        """Prediction intervals with columns ['mean', 'se', 'lower', 'upper']."""
        raise NotImplementedError(f"{type(self).__name__} does not provide prediction intervals")

    @property
    def df_resid(self) -> float:
        return float("nan")


class LinearRegressor(ABC):
    """Fitting capability injected into the model bank: ``fit(y, X) -> FittedRegression``."""

    @abstractmethod
    def fit(self, y: pd.Series, X: pd.DataFrame) -> FittedRegression:
        pass


class OLSFit(FittedRegression):
    """statsmodels OLS results behind the ``FittedRegression`` interface."""

    def __init__(self, results):
        self.results = results

    @property
    def params(self) -> pd.Series:
        return self.results.params

    @property
    def residuals(self) -> pd.Series:
        return self.results.resid

    @property
    def df_resid(self) -> float:
        return float(self.results.df_resid)

    def predict(self, X: pd.DataFrame) -> pd.Series:
        return pd.Series(np.asarray(self.results.predict(X), dtype=float), index=X.index)

    def predict_interval(self, X: pd.DataFrame, level: float = 95.0) -> pd.DataFrame:
        """
        Forecast intervals for new observations (parameter plus error variance).

        Parameters
        ----------
        X : pd.DataFrame
            Design rows to predict.
        level : float, default=95.0
            Coverage in percent.
        """
        if not self.df_resid > 0:
            raise EvaluationError("Forecast intervals need residual degrees of freedom; the fit is exactly determined",
                                  details={"df_resid": self.df_resid})
        pred = self.results.get_prediction(X)
        frame = pred.summary_frame(alpha=1.0 - level / 100.0)
        se = np.sqrt(np.asarray(pred.se_mean, dtype=float) ** 2 + float(self.results.scale))
        return pd.DataFrame({
            "mean": frame["mean"].to_numpy(),
            "se": se,
            "lower": frame["obs_ci_lower"].to_numpy(),
            "upper": frame["obs_ci_upper"].to_numpy(),
        }, index=X.index)


class OLSRegressor(LinearRegressor):
    """
    Ordinary least squares via statsmodels.

    Parameters
    ----------
    cov_type : str, default="nonrobust"
        Covariance estimator passed to ``OLS.fit`` (e.g. "HAC"). Point
        estimates are unaffected.
    cov_kwds : dict, optional
        Extra arguments for the covariance estimator. For "HAC" a missing
        ``maxlags`` defaults to ``HAC_DEFAULT_MAXLAGS`` (one year of months).
    """

    HAC_DEFAULT_MAXLAGS = 12

    def __init__(self, cov_type: str = "nonrobust", cov_kwds: Optional[dict] = None):
        self.cov_type = cov_type
        self.cov_kwds = dict(cov_kwds or {})
        if str(cov_type).upper() == "HAC":
            self.cov_kwds.setdefault("maxlags", self.HAC_DEFAULT_MAXLAGS)

    def fit(self, y: pd.Series, X: pd.DataFrame) -> OLSFit:
        n_obs, n_coef = X.shape
        if n_obs < n_coef:
            raise FitError(f"Training window has {n_obs} usable rows but {n_coef} coefficients to estimate",
                           details={"rows": n_obs, "coefficients": n_coef})

        values = X.to_numpy(dtype=float)
        if not np.isfinite(values).all() or not np.isfinite(y.to_numpy(dtype=float)).all():
            raise FitError("Design matrix or target contains non-finite values")

        rank = int(np.linalg.matrix_rank(values))
        if rank < n_coef:
            raise FitError(f"Rank-deficient design matrix: rank {rank} < {n_coef} coefficients",
                           details={"rank": rank, "coefficients": n_coef})

        fit_kwargs = {"cov_type": self.cov_type}
        if self.cov_kwds:
            fit_kwargs["cov_kwds"] = self.cov_kwds
        try:
            results = sm.OLS(y, X).fit(**fit_kwargs)
        except (KeyError, ValueError, TypeError, np.linalg.LinAlgError) as e:
            raise FitError(f"OLS fit failed with cov_type={self.cov_type!r}: {e!r}",
                           details={"cov_type": self.cov_type, "cov_kwds": self.cov_kwds}) from e
        return OLSFit(results)


def lag_column(name: str, lag: int) -> str:
    return f"{name}_lag{lag}"


def build_lagged_design(table: pd.DataFrame,
                        predictor: str,
                        lags: Iterable[int] = LAG_RANGE,
                        base: str = BASE_REGRESSOR) -> pd.DataFrame:
    """
    Build the Phillips-curve design matrix for one alternating predictor.

    The design is identical across models except for the predictor block:
    a constant, ``base`` at each lag in ``lags`` and ``predictor`` at each lag
    in ``lags`` (1 + 12 + 12 = 25 columns with the default lags 12..23).

    Parameters
    ----------
    table : pd.DataFrame
        Contiguous monthly table holding ``base`` and ``predictor`` columns.
    predictor : str
        Column supplying the alternating regressor block.
    lags : Iterable[int], default=range(12, 24)
        Positional lags in months.
    base : str, default="dinfl"
        Column supplying the common autoregressive block.

    Returns
    -------
    pd.DataFrame
        Same index as ``table``; leading rows without full lag history are NaN.

    Raises
    ------
    FitError
        If a column is missing or the monthly index has gaps.
    """
    missing = [c for c in (base, predictor) if c not in table.columns]
    if missing:
        raise FitError(f"Design columns missing from table: {missing}")
    if isinstance(table.index, pd.PeriodIndex) and not is_contiguous_monthly(table.index):
        raise FitError("Lagged design requires a contiguous monthly table")

    lags = list(lags)
    columns = {"const": pd.Series(1.0, index=table.index)}
    for name in (base, predictor):
        for lag in lags:
            columns[lag_column(name, lag)] = table[name].shift(lag)
    return pd.DataFrame(columns, index=table.index)


@dataclass(frozen=True, eq=False)
class FittedModel:
    """One estimated Phillips-curve regression; read-only after fitting."""

    name: str
    predictor: str
    coefficients: pd.Series
    training_window: pd.DataFrame = field(repr=False)
    regression: FittedRegression = field(repr=False)
    lags: Tuple[int, ...] = tuple(LAG_RANGE)

    def design(self, table: pd.DataFrame) -> pd.DataFrame:
        return build_lagged_design(table, self.predictor, self.lags)

    def fitted_values(self) -> pd.Series:
        """In-sample predictions over the training rows with complete lags."""
        X = self.design(self.training_window).dropna()
        return self.regression.predict(X).rename(self.name)

    def _forecast_design(self, new_data: pd.DataFrame) -> pd.DataFrame:
        # Lags for new rows reach back into the training window's tail
        history = pd.concat([self.training_window, new_data])
        if history.index.has_duplicates:
            raise EvaluationError(f"{self.name}: forecast window overlaps the training window")
        if not is_contiguous_monthly(history.index):
            raise EvaluationError(f"{self.name}: forecast window must directly follow the training window")
        X = self.design(history).loc[new_data.index]
        if X.isna().any().any():
            raise EvaluationError(f"{self.name}: insufficient history to build lagged regressors")
        return X

    def forecast(self, new_data: pd.DataFrame) -> pd.Series:
        """Point forecasts for each row of ``new_data``."""
        if new_data.empty:
            raise EvaluationError(f"{self.name}: nothing to forecast")
        return self.regression.predict(self._forecast_design(new_data)).rename(self.name)

    def forecast_interval(self, new_data: pd.DataFrame, level: float = 95.0) -> pd.DataFrame:
        return self.regression.predict_interval(self._forecast_design(new_data), level=level)


@dataclass(frozen=True, eq=False)
class EnsembleModel:
    """
    Unweighted mean of the component models' forecasts.

    Holds no coefficients. Intervals combine the component forecast standard
    errors through the correlation of their in-sample residuals, so the
    variance of the mean is w' S w (w = 1/k) rather than an average of bounds.
    """

    components: Tuple[FittedModel, ...]
    name: str = ENSEMBLE_NAME

    def _mean(self, frames) -> pd.Series:
        return pd.concat(frames, axis=1).mean(axis=1).rename(self.name)

    def fitted_values(self) -> pd.Series:
        return self._mean([m.fitted_values() for m in self.components])

    def forecast(self, new_data: pd.DataFrame) -> pd.Series:
        return self._mean([m.forecast(new_data) for m in self.components])

    def residual_correlation(self) -> pd.DataFrame:
        resid = pd.concat([m.regression.residuals.rename(m.name) for m in self.components], axis=1).dropna()
        return resid.corr()

    def forecast_interval(self, new_data: pd.DataFrame, level: float = 95.0) -> pd.DataFrame:
        parts = [m.forecast_interval(new_data, level=level) for m in self.components]
        k = len(parts)
        se = np.column_stack([p["se"].to_numpy() for p in parts])
        corr = self.residual_correlation().to_numpy()
        w = np.full(k, 1.0 / k)
        # Per-row covariance D R D with D = diag(se_t)
        var = np.einsum("ti,ij,tj->t", se * w, corr, se * w)
        mean = np.mean(np.column_stack([p["mean"].to_numpy() for p in parts]), axis=1)
        combined_se = np.sqrt(var)

        dfs = [m.regression.df_resid for m in self.components]
        df = min(dfs) if all(np.isfinite(dfs)) else np.inf
        if not df > 0:
            raise EvaluationError(f"{self.name}: forecast intervals need residual degrees of freedom",
                                  details={"df_resid": dfs})
        q = float(stats.t.ppf(0.5 + level / 200.0, df)) if np.isfinite(df) else float(stats.norm.ppf(0.5 + level / 200.0))
        return pd.DataFrame({
            "mean": mean,
            "se": combined_se,
            "lower": mean - q * combined_se,
            "upper": mean + q * combined_se,
        }, index=new_data.index)


@dataclass(frozen=True, eq=False)
class ModelBank:
    """The four fitted Phillips-curve models and their ensemble."""

    models: Dict[str, FittedModel]
    ensemble: EnsembleModel

    def all_models(self) -> Dict[str, object]:
        out: Dict[str, object] = dict(self.models)
        out[self.ensemble.name] = self.ensemble
        return out

    def coefficient_table(self) -> pd.DataFrame:
        """Coefficients by regressor (rows) and model (columns); NaN where not in a model."""
        return pd.concat([m.coefficients.rename(name) for name, m in self.models.items()], axis=1)


def fit_phillips_model(name: str,
                       predictor: str,
                       train: pd.DataFrame,
                       regressor: LinearRegressor,
                       lags: Iterable[int] = LAG_RANGE) -> FittedModel:
    """
    Fit one Phillips-curve regression of ``dinfl12`` on the lagged design.

    Only training rows whose lags are all defined enter the regression.

    Raises
    ------
    FitError
        If the target is missing, too few rows remain, or the design is rank-deficient.
    """
    lags = tuple(lags)
    if TARGET not in train.columns:
        raise FitError(f"Training table has no '{TARGET}' column")

    X = build_lagged_design(train, predictor, lags)
    mask = X.notna().all(axis=1) & train[TARGET].notna()
    X = X.loc[mask]
    y = train.loc[mask, TARGET]

    logger.debug("Fitting %s on %d rows x %d regressors", name, X.shape[0], X.shape[1])
    regression = regressor.fit(y, X)

    coefficients = regression.params.reindex(X.columns)
    if coefficients.isna().any():
        raise FitError(f"{name}: regressor returned incomplete coefficients")

    return FittedModel(
        name=name,
        predictor=predictor,
        coefficients=coefficients,
        training_window=train,
        regression=regression,
        lags=lags,
    )


def fit_model_bank(train: pd.DataFrame,
                   regressor: Optional[LinearRegressor] = None,
                   predictors: Optional[Dict[str, str]] = None,
                   lags: Iterable[int] = LAG_RANGE) -> ModelBank:
    """
    Fit the four Phillips-curve models on the training window and derive the ensemble.

    Parameters
    ----------
    train : pd.DataFrame
        Training split of the transformed table.
    regressor : LinearRegressor, optional
        Fitting capability; defaults to ``OLSRegressor()``.
    predictors : Dict[str, str], optional
        Model name -> predictor column; defaults to ``PREDICTORS``.
    lags : Iterable[int], default=range(12, 24)
        Lags used for both regressor blocks.

    Returns
    -------
    ModelBank
    """
    regressor = regressor or OLSRegressor()
    predictors = predictors or PREDICTORS
    lags = tuple(lags)

    models: Dict[str, FittedModel] = {}
    for name, predictor in tqdm(predictors.items(), desc="Fitting Phillips-curve models", disable=None):
        models[name] = fit_phillips_model(name, predictor, train, regressor, lags)
        logger.info("Fitted %s (%s): %d coefficients", name, predictor, len(models[name].coefficients))

    ensemble = EnsembleModel(components=tuple(models.values()))
    return ModelBank(models=models, ensemble=ensemble)
