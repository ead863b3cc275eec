"""
Properties that hold for every hyperexponential distribution, checked on
randomly drawn parameterizations.
"""

import mpmath
import numpy as np
import pytest

from hyperexp import Hyperexponential


def random_parameterizations(seed, count=12):
    rng = np.random.default_rng(seed)
    params = []
    for _ in range(count):
        k = int(rng.integers(1, 6))
        probabilities = rng.dirichlet(np.ones(k))
        rates = 10.0 ** rng.uniform(-1.5, 1.5, size=k)
        params.append((probabilities, rates))
    return params


PARAMS = random_parameterizations(seed=42)


@pytest.fixture(params=range(len(PARAMS)), ids=lambda i: f"draw{i}")
def dist(request):
    probabilities, rates = PARAMS[request.param]
    return Hyperexponential(probabilities, rates)


class TestDistributionFunctions:

    def test_cdf_plus_sf_is_one(self, dist):
        x = np.concatenate([[0.0], np.logspace(-3, 2, 40)])
        np.testing.assert_allclose(dist.cdf(x) + dist.sf(x), 1.0, rtol=0, atol=1e-14)

    def test_cdf_monotone_and_bounded(self, dist):
        x = np.linspace(0, 50, 200)
        cdf = dist.cdf(x)
        assert np.all(np.diff(cdf) >= 0)
        assert np.all((cdf >= 0) & (cdf <= 1 + 1e-15))

    def test_pdf_decreasing(self, dist):
        pdf = dist.pdf(np.linspace(0, 20, 100))
        assert np.all(np.diff(pdf) <= 0)
        assert dist.pdf(0.0) == pytest.approx(np.dot(dist.probabilities, dist.rates))

    def test_hazard_decreasing_to_slowest_rate(self, dist):
        hazard = dist.hazard(np.linspace(0, 200, 100))
        assert np.all(np.diff(hazard) <= 1e-12 * hazard[:-1])
        assert hazard[-1] >= min(dist.rates) * (1 - 1e-12)


class TestQuantiles:

    QS = np.array([1e-10, 1e-4, 0.01, 0.1, 0.25, 0.5, 0.75, 0.9, 0.99])

    def test_cdf_of_ppf(self, dist):
        np.testing.assert_allclose(dist.cdf(dist.ppf(self.QS)), self.QS, rtol=1e-12)

    def test_sf_of_isf(self, dist):
        qs = np.concatenate([self.QS, [1e-50, 1e-200]])
        np.testing.assert_allclose(dist.sf(dist.isf(qs)), qs, rtol=1e-11)

    def test_ppf_and_isf_agree(self, dist):
        qs = self.QS[2:]
        np.testing.assert_allclose(dist.ppf(qs), dist.isf(1 - qs), rtol=1e-9)

    def test_quantiles_increasing(self, dist):
        assert np.all(np.diff(dist.ppf(self.QS)) > 0)


class TestMoments:

    def test_mean(self, dist):
        expected = np.sum(np.array(dist.probabilities) / np.array(dist.rates))
        assert dist.mean() == pytest.approx(expected, rel=1e-13)

    def test_coefficient_of_variation_at_least_one(self, dist):
        assert dist.var() >= 0
        assert dist.std() >= dist.mean() * (1 - 1e-12)

    def test_mode_is_zero(self, dist):
        assert dist.mode() == 0

    def test_excess_kurtosis(self, dist):
        assert dist.kurtosis_excess() == pytest.approx(dist.kurtosis() - 3)


class TestPrecisionAgreement:

    def test_float32_close_to_double(self, dist):
        single = Hyperexponential(np.asarray(dist.probabilities, dtype=np.float32),
                                  np.asarray(dist.rates, dtype=np.float32))
        x = np.linspace(0, 5, 11)
        np.testing.assert_allclose(single.cdf(x), dist.cdf(x), rtol=1e-4, atol=1e-6)
        np.testing.assert_allclose(single.ppf(0.5), dist.ppf(0.5), rtol=1e-4)

    def test_mpmath_refines_double(self, dist):
        with mpmath.workdps(40):
            wide = Hyperexponential([mpmath.mpf(p) for p in dist.probabilities],
                                    [mpmath.mpf(r) for r in dist.rates])
            x = wide.ppf(mpmath.mpf('0.5'))
            assert abs(wide.cdf(x) - mpmath.mpf('0.5')) < mpmath.mpf('1e-37')
            assert float(x) == pytest.approx(float(dist.ppf(0.5)), rel=1e-12)
