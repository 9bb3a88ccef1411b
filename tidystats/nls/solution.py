"""
Nonlinear least-squares solution types.

NLSSolution wraps Result[NLSParams] and exposes the accessors of an R nls
object (getPars, getEnv, predict, resid, summary, confint). It is the
reference implementation of the NonlinearFit protocol the tidiers consume.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar
import numpy as np
import pandas as pd
from numpy.typing import NDArray
from scipy import stats as sp_stats

from tidystats.core.compute.qr import qr_cpu
from tidystats.core.result import Result
from tidystats.core.table import as_data_frame
from tidystats.core.validation import check_conf_level
from tidystats.nls._common import ConvInfo, NLSParams
from tidystats.nls._profile import conf_int
from tidystats.nls.design import NLSDesign


COEF_COLUMNS = ("Estimate", "Std. Error", "t value", "Pr(>|t|)")


@dataclass(frozen=True)
class NLSSummary:
    """
    Summary of a nonlinear fit. Maps to R's summary.nls.

    Attributes:
        coefficients: DataFrame indexed by parameter name with columns
            'Estimate', 'Std. Error', 't value', 'Pr(>|t|)'
        sigma: Residual standard error
        df: (number of parameters, residual degrees of freedom)
        conv_info: Convergence diagnostics
        correlation: Correlation matrix of the estimates
        formula: Readable description of the model
    """
    coefficients: pd.DataFrame
    sigma: float
    df: tuple[int, int]
    conv_info: ConvInfo
    correlation: NDArray[np.floating[Any]]
    formula: str

    def __str__(self) -> str:
        """
        Format as R's print.summary.nls output.

        Formula: rate ~ Vm(conc, Vm, K)

        Parameters:
             Estimate Std. Error t value Pr(>|t|)
        Vm  2.127e+02  6.947e+00  30.615 3.24e-11
        K   6.412e-02  8.281e-03   7.743 1.57e-05

        Residual standard error: 10.93 on 10 degrees of freedom

        Number of iterations to convergence: 7
        Achieved convergence tolerance: 1.937e-06
        """
        lines = [f"Formula: {self.formula}", "", "Parameters:"]
        table = self.coefficients.copy()
        table["Estimate"] = table["Estimate"].map(lambda v: f"{v:.4g}")
        table["Std. Error"] = table["Std. Error"].map(lambda v: f"{v:.4g}")
        table["t value"] = table["t value"].map(lambda v: f"{v:.3f}")
        table["Pr(>|t|)"] = table["Pr(>|t|)"].map(_format_pvalue)
        lines.append(table.to_string())
        lines.append("")
        lines.append(
            f"Residual standard error: {self.sigma:.4g} on {self.df[1]} degrees of freedom"
        )
        lines.append("")
        if self.conv_info.is_conv:
            lines.append(f"Number of iterations to convergence: {self.conv_info.fin_iter}")
        else:
            lines.append(f"Number of iterations till stop: {self.conv_info.fin_iter}")
        lines.append(f"Achieved convergence tolerance: {self.conv_info.fin_tol:.4g}")
        if not self.conv_info.is_conv:
            lines.append(f"Reason stopped: {self.conv_info.stop_message}")
        lines.append("")
        return "\n".join(lines)


@dataclass
class NLSSolution:
    """
    User-facing nonlinear least-squares results.

    Wraps the backend Result and provides R-style accessors. Tidy it with
    tidy_nls(), augment_nls() and glance_nls(), or the generic tidy(),
    augment() and glance().
    """
    _result: Result[NLSParams]
    _design: NLSDesign

    tidy_kind: ClassVar[str] = "nls"

    # --- Parameters ---

    @property
    def design(self) -> NLSDesign:
        return self._design

    @property
    def coefficients(self) -> NDArray[np.floating[Any]]:
        return self._result.params.coefficients

    @property
    def param_names(self) -> tuple[str, ...]:
        return self._design.param_names

    def get_pars(self) -> dict[str, float]:
        """Parameter estimates by name, in model order (R's m$getPars())."""
        return {
            name: float(value)
            for name, value in zip(self.param_names, self.coefficients)
        }

    def get_env(self) -> dict[str, Any]:
        """
        Variables the model was evaluated in (R's m$getEnv()).

        The response, every data variable the model reads, and the
        parameter estimates. Arrays are copies.
        """
        env: dict[str, Any] = {self._design.response: self._design.y.copy()}
        for name, value in self._design.variables.items():
            env[name] = value.copy() if isinstance(value, np.ndarray) else value
        env.update(self.get_pars())
        return env

    # --- Observations ---

    @property
    def n_obs(self) -> int:
        return self._design.n

    @property
    def fitted_values(self) -> NDArray[np.floating[Any]]:
        return self._result.params.fitted_values

    def predict(self, newdata: Any = None) -> NDArray[np.floating[Any]]:
        """
        Fitted values, or predictions at new data.

        Args:
            newdata: DataFrame or mapping holding the model's data variables.
                If None, the fitted values are returned.
        """
        if newdata is None:
            return self.fitted_values.copy()
        frame = as_data_frame(newdata, "newdata")
        variables = {
            name: frame[name].to_numpy(dtype=np.float64) if name in frame.columns else value
            for name, value in self._design.variables.items()
        }
        return self._design.evaluate(self.coefficients, variables)

    def residuals(self) -> NDArray[np.floating[Any]]:
        """Response minus fitted values, one per observation."""
        return self._result.params.residuals.copy()

    # --- Fit statistics ---

    @property
    def deviance(self) -> float:
        """Residual sum of squares."""
        return self._result.params.rss

    @property
    def df_residual(self) -> int:
        return self._result.params.df_residual

    @property
    def sigma(self) -> float:
        """Residual standard error, sqrt(RSS / (n - p))."""
        df = self.df_residual
        if df <= 0:
            return float("nan")
        return float(np.sqrt(self.deviance / df))

    @property
    def conv_info(self) -> ConvInfo:
        return self._result.params.conv_info

    def vcov(self) -> NDArray[np.floating[Any]]:
        """Estimated covariance of the parameters, sigma^2 (J'J)^-1."""
        qr = qr_cpu(self._result.params.gradient)
        return qr.unscaled_covariance() * self.sigma ** 2

    @property
    def standard_errors(self) -> NDArray[np.floating[Any]]:
        return np.sqrt(np.diag(self.vcov()))

    @property
    def t_statistics(self) -> NDArray[np.floating[Any]]:
        return self.coefficients / self.standard_errors

    @property
    def p_values(self) -> NDArray[np.floating[Any]]:
        """Two-sided p-values on n - p degrees of freedom."""
        if self.df_residual <= 0:
            return np.full(len(self.coefficients), np.nan)
        return 2.0 * sp_stats.t.sf(np.abs(self.t_statistics), self.df_residual)

    def summary(self) -> NLSSummary:
        """R's summary(nls_fit)."""
        table = pd.DataFrame(
            {
                COEF_COLUMNS[0]: self.coefficients,
                COEF_COLUMNS[1]: self.standard_errors,
                COEF_COLUMNS[2]: self.t_statistics,
                COEF_COLUMNS[3]: self.p_values,
            },
            index=list(self.param_names),
        )
        cov = self.vcov()
        sd = np.sqrt(np.diag(cov))
        return NLSSummary(
            coefficients=table,
            sigma=self.sigma,
            df=(self._design.p, self.df_residual),
            conv_info=self.conv_info,
            correlation=cov / np.outer(sd, sd),
            formula=self.formula,
        )

    @property
    def formula(self) -> str:
        model = self._design.model
        name = getattr(model, "__name__", type(model).__name__)
        args = ", ".join(list(self._design.variables) + list(self.param_names))
        return f"{self._design.response} ~ {name}({args})"

    def confint(
        self,
        level: float = 0.95,
        *,
        method: str = "profile",
        verbose: bool = True,
    ) -> NDArray[np.floating[Any]]:
        """
        Confidence intervals for the parameters. Matches MASS confint.nls.

        Args:
            level: Confidence level in (0, 1)
            method: 'profile' (profile-t, default) or 'wald'
            verbose: Log the profiling progress message at INFO
                (DEBUG when False)

        Returns:
            (p, 2) array of lower/upper limits; a flat pair when the model
            has a single parameter

        Raises:
            IntervalComputationError: If a profile cannot be traced
        """
        level = check_conf_level(level, "level")
        return conf_int(self, level, method=method, verbose=verbose)

    # --- Metadata ---

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def __repr__(self) -> str:
        pars = ", ".join(f"{k}={v:.4g}" for k, v in self.get_pars().items())
        return (
            f"NLSSolution({self.formula}, {pars}, "
            f"sigma={self.sigma:.4g}, converged={self.conv_info.is_conv})"
        )


def _format_pvalue(p: float) -> str:
    """Format p-value like R does."""
    if not np.isfinite(p):
        return "NA"
    if p < 2e-16:
        return "<2e-16"
    return f"{p:.3g}"
