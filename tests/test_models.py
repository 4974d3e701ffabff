"""
Unit tests for the generatrix model family.
"""

import unittest

import numpy as np

from waveguide.exceptions import ConfigurationError
from waveguide.geometry import models
from waveguide.geometry.models import (
    AxisymmetricAngle, ClothoidTermination, EllipticalAngle, GeneratrixModel,
    GeneratrixModelBuilder, RectangularAngle, RectangularMorphTarget, SuperellipseTermination,
)

R_INIT = 25.4
ALPHA_INIT = np.radians(1.0)
LENGTH = 200.0


def _all_variants(k=1.0):
    args = (k, R_INIT, ALPHA_INIT, 0.7, 0.997, 6.0)
    return [
        models.axisymmetric(*args, np.radians(45.0)),
        models.ellipsoidal(*args, np.radians(45.0), np.radians(30.0)),
        models.rectangular(*args, np.radians(45.0), np.radians(30.0)),
        models.rectangular_morph(*args, np.radians(45.0), np.radians(30.0)),
        models.axisymmetric_clothoid(k, R_INIT, ALPHA_INIT, 200.0, 60.0, np.radians(45.0)),
        models.rectangular_clothoid(k, R_INIT, ALPHA_INIT, 180.0, 50.0,
                                    np.radians(45.0), np.radians(30.0)),
    ]


class TestThroatRadius(unittest.TestCase):
    """r(0, θ, L) equals the throat radius for every variant."""

    def test_throat_radius_all_variants(self):
        for model in _all_variants():
            for theta in np.linspace(0, 2 * np.pi, 13):
                self.assertAlmostEqual(model.radial_distance(0.0, theta, LENGTH), R_INIT,
                                       places=9, msg=f"{model.name} at theta={theta}")

    def test_throat_radius_with_expansion_factor(self):
        for model in _all_variants(k=0.8):
            self.assertAlmostEqual(model.radial_distance(0.0, 0.3, LENGTH), R_INIT, places=9)


class TestAngleRules(unittest.TestCase):

    def setUp(self):
        self.axisym = models.axisymmetric(1.0, R_INIT, ALPHA_INIT, 0.7, 0.997, 6.0,
                                          np.radians(40.0))

    def test_axisymmetric_has_no_azimuth_dependence(self):
        z = np.linspace(0, LENGTH, 25)
        reference = self.axisym.radial_distance(z, 0.0, LENGTH)
        for theta in [0.4, 1.3, np.pi, 4.9]:
            np.testing.assert_allclose(self.axisym.radial_distance(z, theta, LENGTH), reference)

    def test_ellipsoidal_with_equal_angles_is_axisymmetric(self):
        ellip = models.ellipsoidal(1.0, R_INIT, ALPHA_INIT, 0.7, 0.997, 6.0,
                                   np.radians(40.0), np.radians(40.0))
        z = np.linspace(0, LENGTH, 25)
        for theta in np.linspace(0, 2 * np.pi, 9):
            np.testing.assert_allclose(ellip.radial_distance(z, theta, LENGTH),
                                       self.axisym.radial_distance(z, theta, LENGTH))

    def test_ellipsoidal_axis_values(self):
        rule = EllipticalAngle(np.radians(45.0), np.radians(30.0))
        self.assertAlmostEqual(rule.tan_alpha(0.0, LENGTH), np.tan(np.radians(30.0)))
        self.assertAlmostEqual(rule.tan_alpha(np.pi / 2, LENGTH), np.tan(np.radians(45.0)))

    def test_rectangular_is_finite_on_axes(self):
        rule = RectangularAngle(np.radians(45.0), np.radians(30.0))
        expected = [1.0, np.tan(np.radians(30.0)), 1.0, np.tan(np.radians(30.0))]
        for theta, value in zip([0.0, np.pi / 2, np.pi, 3 * np.pi / 2], expected):
            result = rule.tan_alpha(theta, LENGTH)
            self.assertTrue(np.isfinite(result))
            self.assertAlmostEqual(result, value, places=12)

    def test_rectangular_diagonal(self):
        rule = RectangularAngle(np.radians(45.0), np.radians(30.0))
        expected = np.tan(np.radians(30.0)) / np.sin(np.pi / 4)
        self.assertAlmostEqual(rule.tan_alpha(np.pi / 4, LENGTH), expected)

    def test_axisymmetric_rule(self):
        self.assertAlmostEqual(AxisymmetricAngle(np.pi / 4).tan_alpha(1.0, LENGTH), 1.0)


class TestMorphBackSolve(unittest.TestCase):

    def test_reaches_target_at_mouth(self):
        model = models.rectangular_morph(1.0, R_INIT, ALPHA_INIT, 0.7, 0.997, 6.0,
                                         np.radians(45.0), np.radians(30.0))
        for theta in [0.0, 0.3, np.pi / 4, np.pi / 2, 2.5, np.pi]:
            target = model.morph.target_radius(theta, LENGTH)
            self.assertAlmostEqual(model.radial_distance(LENGTH, theta, LENGTH), target, places=6)

    def test_target_radius_uses_length(self):
        target = RectangularMorphTarget(np.radians(45.0), np.radians(30.0))
        self.assertAlmostEqual(target.target_radius(0.0, LENGTH), LENGTH)
        self.assertAlmostEqual(target.target_radius(np.pi / 2, LENGTH),
                               np.tan(np.radians(30.0)) * LENGTH)

    def test_unreachable_target_raises(self):
        model = models.rectangular_morph(1.0, R_INIT, ALPHA_INIT, 0.0, 0.997, 6.0,
                                         np.radians(1.0), np.radians(1.0))
        with self.assertRaises(ConfigurationError) as ctx:
            model.radial_distance(10.0, 0.0, LENGTH)
        self.assertLess(ctx.exception.details['radicand'], 0)


class TestModelValidation(unittest.TestCase):

    def test_builder_requires_angle_rule(self):
        with self.assertRaises(ConfigurationError):
            GeneratrixModelBuilder().with_superellipse_termination(0.7, 0.997, 6.0).build()

    def test_builder_rejects_angle_and_morph(self):
        builder = (GeneratrixModelBuilder()
                   .with_angle(AxisymmetricAngle(0.5))
                   .with_morph_target(RectangularMorphTarget(0.5, 0.4)))
        with self.assertRaises(ConfigurationError):
            builder.build()

    def test_builder_rejects_second_angle(self):
        builder = GeneratrixModelBuilder().with_angle(AxisymmetricAngle(0.5))
        with self.assertRaises(ConfigurationError):
            builder.with_angle(AxisymmetricAngle(0.6))

    def test_builder_rejects_two_terminations(self):
        builder = (GeneratrixModelBuilder()
                   .with_angle(AxisymmetricAngle(0.5))
                   .with_superellipse_termination(0.7, 0.997, 6.0)
                   .with_clothoid_termination(100.0, 50.0))
        with self.assertRaises(ConfigurationError):
            builder.build()

    def test_direct_construction_validates(self):
        with self.assertRaises(ConfigurationError):
            GeneratrixModel(k=1.0, r_init=R_INIT, alpha_init=ALPHA_INIT)
        with self.assertRaises(ConfigurationError):
            GeneratrixModel(k=1.0, r_init=0.0, alpha_init=ALPHA_INIT,
                            angle=AxisymmetricAngle(0.5))

    def test_termination_parameters_validated(self):
        with self.assertRaises(ConfigurationError):
            SuperellipseTermination(s=0.7, q=0.0, n=6.0)
        with self.assertRaises(ConfigurationError):
            ClothoidTermination(term_length=100.0, term_end_radius=0.0)

    def test_z_outside_domain_raises(self):
        model = _all_variants()[0]
        with self.assertRaises(ConfigurationError):
            model.radial_distance(-1.0, 0.0, LENGTH)
        with self.assertRaises(ConfigurationError):
            model.radial_distance(LENGTH + 1.0, 0.0, LENGTH)
        with self.assertRaises(ConfigurationError):
            model.radial_distance(0.0, 0.0, 0.0)

    def test_models_are_immutable(self):
        model = _all_variants()[0]
        with self.assertRaises(Exception):
            model.k = 2.0


class TestTerminations(unittest.TestCase):

    def test_superellipse_is_zero_at_throat(self):
        term = SuperellipseTermination(0.7, 0.997, 6.0)
        self.assertAlmostEqual(float(term.distance(0.0, LENGTH)), 0.0)
        self.assertGreater(float(term.distance(LENGTH, LENGTH)), 0.0)

    def test_clothoid_models_have_no_flare_term(self):
        model = _all_variants()[4]
        np.testing.assert_array_equal(model.termination_distance(np.array([0.0, 50.0]), LENGTH),
                                      [0.0, 0.0])

    def test_clothoid_step_count_rounds_half_up(self):
        self.assertEqual(ClothoidTermination(200.0, 60.0).step_count(4.0), 50)
        self.assertEqual(ClothoidTermination(10.0, 60.0).step_count(4.0), 3)
        self.assertEqual(ClothoidTermination(6.0, 60.0).step_count(4.0), 2)
        self.assertEqual(ClothoidTermination(5.0, 60.0).step_count(4.0), 1)

    def test_clothoid_curvature_angle(self):
        term = ClothoidTermination(200.0, 60.0)
        self.assertAlmostEqual(term.curvature_angle(0.0, 0.3), 0.3)
        self.assertAlmostEqual(term.curvature_angle(8.0, 0.3), 0.3 + 64.0 / 24000.0)


class TestScalarAndArrayInputs(unittest.TestCase):

    def test_scalar_returns_float(self):
        model = _all_variants()[1]
        self.assertIsInstance(model.radial_distance(50.0, 0.2, LENGTH), float)

    def test_array_returns_array(self):
        model = _all_variants()[1]
        z = np.linspace(0, LENGTH, 7)
        r = model.radial_distance(z, 0.2, LENGTH)
        self.assertEqual(r.shape, (7,))
        self.assertTrue(np.all(np.diff(r) > 0))


if __name__ == '__main__':
    unittest.main()
