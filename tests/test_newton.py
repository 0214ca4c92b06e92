"""
Test: Newton-Raphson driver.

f(x) = x^2 - 2 has root sqrt(2); Newton converges quadratically from x0 = 1.
"""
import math
import pytest
import jax.numpy as jnp


def _sqrt2_system():
    from pyohm.linalg import Matrix, Vector, NonlinearSystem

    return NonlinearSystem(
        residual=lambda x: Vector(1, x.data ** 2 - 2.0),
        jacobian=lambda x: Matrix(1, 1, 2.0 * x.data),
        size=1,
    )


def test_sqrt2_converges_quadratically():
    from pyohm.linalg import Vector, solve_newton_raphson

    result = solve_newton_raphson(_sqrt2_system(), Vector.from_values([1.0]))

    assert result.converged
    assert abs(float(result.solution.data[0]) - math.sqrt(2.0)) < 1e-10
    assert 0 < result.iterations < 10
    assert result.final_residual_norm < 1e-12
    assert result.final_update_norm < 1e-12


def test_damping_increases_iterations():
    """Halving the damping factor strictly increases the iteration count."""
    from pyohm import NewtonOptions
    from pyohm.linalg import Vector, solve_newton_raphson

    x0 = Vector.from_values([1.0])
    full = solve_newton_raphson(_sqrt2_system(), x0, NewtonOptions(damping_factor=1.0))
    half = solve_newton_raphson(_sqrt2_system(), x0, NewtonOptions(damping_factor=0.5))
    quarter = solve_newton_raphson(_sqrt2_system(), x0, NewtonOptions(damping_factor=0.25, max_iterations=500))

    assert full.iterations < half.iterations < quarter.iterations
    assert abs(float(half.solution.data[0]) - math.sqrt(2.0)) < 1e-10


def test_initial_guess_at_root_skips_jacobian():
    from pyohm.linalg import Vector, NonlinearSystem, solve_newton_raphson

    def jacobian(x):
        raise AssertionError("Jacobian must not be evaluated")

    system = NonlinearSystem(
        residual=lambda x: Vector(1, x.data - 3.0),
        jacobian=jacobian,
        size=1,
    )
    result = solve_newton_raphson(system, Vector.from_values([3.0]))
    assert result.converged
    assert result.iterations == 0
    assert result.final_update_norm == 0.0


def test_two_dimensional_system():
    """x^2 + y^2 = 4 and x = y meet at (sqrt 2, sqrt 2)."""
    from pyohm.linalg import Matrix, Vector, NonlinearSystem, solve_newton_raphson

    def residual(v):
        x, y = v.data
        return Vector.from_values([x ** 2 + y ** 2 - 4.0, x - y])

    def jacobian(v):
        x, y = v.data
        return Matrix.from_array(jnp.array([[2.0 * x, 2.0 * y], [1.0, -1.0]]))

    system = NonlinearSystem(residual, jacobian, size=2)
    result = solve_newton_raphson(system, Vector.from_values([1.0, 0.5]))

    assert result.converged
    assert jnp.allclose(result.solution.data, math.sqrt(2.0), atol=1e-10)


def test_initial_guess_not_modified():
    from pyohm.linalg import Vector, solve_newton_raphson

    x0 = Vector.from_values([1.0])
    solve_newton_raphson(_sqrt2_system(), x0)
    assert x0.to_list() == [1.0]


class TestFailures:

    def test_zero_jacobian_is_singular(self):
        from pyohm import ConvergenceError, ErrorCode
        from pyohm.linalg import Matrix, Vector, NonlinearSystem, NewtonState, solve_newton_raphson

        system = NonlinearSystem(
            residual=lambda x: Vector(1, x.data ** 2 - 2.0),
            jacobian=lambda x: Matrix.zeros(1, 1),
            size=1,
        )
        with pytest.raises(ConvergenceError, match="singular Jacobian at iteration 1") as exc_info:
            solve_newton_raphson(system, Vector.from_values([1.0]))

        err = exc_info.value
        assert err.code == ErrorCode.CONVERGENCE_FAILED
        assert err.state == NewtonState.FAILED_SINGULAR
        assert err.iteration == 1

    def test_max_iterations_exhausted(self):
        """Heavily damped steps on f(x) = x - 1 cannot converge in one iteration."""
        from pyohm import ConvergenceError, NewtonOptions
        from pyohm.linalg import Matrix, Vector, NonlinearSystem, NewtonState, solve_newton_raphson

        system = NonlinearSystem(
            residual=lambda x: Vector(1, x.data - 1.0),
            jacobian=lambda x: Matrix.identity(1),
            size=1,
        )
        opts = NewtonOptions(max_iterations=1, damping_factor=0.5)
        with pytest.raises(ConvergenceError, match="did not converge after 1 iterations") as exc_info:
            solve_newton_raphson(system, Vector.from_values([0.0]), opts)

        err = exc_info.value
        assert err.state == NewtonState.FAILED_MAX_ITERATIONS
        assert abs(err.residual_norm - 0.5) < 1e-15
        assert abs(err.update_norm - 0.5) < 1e-15


class TestPreconditions:

    @pytest.mark.parametrize("damping", [0.0, -0.5, 1.5])
    def test_damping_out_of_range(self, damping):
        from pyohm import InvalidParameterError, NewtonOptions
        from pyohm.linalg import Vector, solve_newton_raphson

        with pytest.raises(InvalidParameterError, match="Damping factor"):
            solve_newton_raphson(
                _sqrt2_system(), Vector.from_values([1.0]), NewtonOptions(damping_factor=damping)
            )

    @pytest.mark.parametrize("max_iterations", [0, -3, 2.5, True])
    def test_max_iterations_must_be_positive_integer(self, max_iterations):
        from pyohm import InvalidParameterError, NewtonOptions
        from pyohm.linalg import Vector, solve_newton_raphson

        with pytest.raises(InvalidParameterError, match="max_iterations"):
            solve_newton_raphson(
                _sqrt2_system(), Vector.from_values([1.0]),
                NewtonOptions(max_iterations=max_iterations),
            )

    def test_dimension_mismatch(self):
        from pyohm import InvalidParameterError
        from pyohm.linalg import Vector, solve_newton_raphson

        with pytest.raises(InvalidParameterError, match="must match system size"):
            solve_newton_raphson(_sqrt2_system(), Vector.from_values([1.0, 2.0]))

    def test_none_inputs(self):
        from pyohm import InvalidParameterError
        from pyohm.linalg import Vector, solve_newton_raphson

        with pytest.raises(InvalidParameterError, match="System"):
            solve_newton_raphson(None, Vector.from_values([1.0]))
        with pytest.raises(InvalidParameterError, match="Initial guess"):
            solve_newton_raphson(_sqrt2_system(), None)

    def test_validation_precedes_evaluation(self):
        from pyohm import InvalidParameterError, NewtonOptions
        from pyohm.linalg import Vector, NonlinearSystem, solve_newton_raphson

        def residual(x):
            raise AssertionError("residual must not be evaluated")

        system = NonlinearSystem(residual, residual, size=1)
        with pytest.raises(InvalidParameterError):
            solve_newton_raphson(system, Vector.from_values([1.0]), NewtonOptions(damping_factor=2.0))


class TestCallbackShapes:
    """Residual and Jacobian results are checked against the system size."""

    def test_jacobian_buffer_too_short(self):
        from pyohm import InvalidParameterError
        from pyohm.linalg import Matrix, Vector, NonlinearSystem, solve_newton_raphson

        system = NonlinearSystem(
            residual=lambda x: Vector(2, x.data ** 2 - 2.0),
            jacobian=lambda x: Matrix(2, 2, 2.0 * x.data),
            size=2,
        )
        with pytest.raises(InvalidParameterError, match="does not match declared 2x2"):
            solve_newton_raphson(system, Vector.from_values([1.0, 1.0]))

    def test_residual_buffer_too_short(self):
        from pyohm import InvalidParameterError
        from pyohm.linalg import Matrix, Vector, NonlinearSystem, solve_newton_raphson

        system = NonlinearSystem(
            residual=lambda x: Vector(2, x.data[:1] - 1.0),
            jacobian=lambda x: Matrix.identity(2),
            size=2,
        )
        with pytest.raises(InvalidParameterError, match="does not match declared length 2"):
            solve_newton_raphson(system, Vector.from_values([0.0, 0.0]))

    def test_residual_wrong_size(self):
        from pyohm import InvalidParameterError
        from pyohm.linalg import Matrix, Vector, NonlinearSystem, solve_newton_raphson

        system = NonlinearSystem(
            residual=lambda x: Vector.from_values([1.0, 2.0, 3.0]),
            jacobian=lambda x: Matrix.identity(2),
            size=2,
        )
        with pytest.raises(InvalidParameterError, match="Residual length"):
            solve_newton_raphson(system, Vector.from_values([0.0, 0.0]))

    def test_jacobian_wrong_shape(self):
        from pyohm import InvalidParameterError
        from pyohm.linalg import Matrix, Vector, NonlinearSystem, solve_newton_raphson

        system = NonlinearSystem(
            residual=lambda x: Vector(1, x.data - 1.0),
            jacobian=lambda x: Matrix.identity(2),
            size=1,
        )
        with pytest.raises(InvalidParameterError, match="Jacobian shape"):
            solve_newton_raphson(system, Vector.from_values([0.0]))

    def test_initial_guess_buffer(self):
        from pyohm import InvalidParameterError
        from pyohm.linalg import Vector, solve_newton_raphson

        with pytest.raises(InvalidParameterError):
            solve_newton_raphson(_sqrt2_system(), Vector(1, jnp.array([1.0, 2.0])))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
