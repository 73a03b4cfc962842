from unittest import TestCase

import numpy as np

from rotcurve.curves import RotationCurve
from rotcurve.errors import InvalidArgumentError, PreconditionError
from rotcurve.interpolation import InterpolationOptions, Method, Technique, find_previous_index, blend
from rotcurve.quaternions import axis_angle_to_quaternion, rotvec_to_quaternion


IDENTITY = np.array([0, 0, 0, 1.])

Y90 = axis_angle_to_quaternion([0, 1, 0], np.pi / 2)

Y45 = axis_angle_to_quaternion([0, 1, 0], np.pi / 4)


def rotation_distance(quaternion0, quaternion1) -> float:
    """
    The distance between two quaternions ignoring the sign (0 when they are the same rotation).
    """

    return min(np.linalg.norm(quaternion0 - quaternion1), np.linalg.norm(quaternion0 + quaternion1))


def random_keyframes(seed: int, size: int) -> np.ndarray:

    rng = np.random.default_rng(seed)

    quaternions = rotvec_to_quaternion(rng.normal(size=(3, size))).T

    # store some of the keyframes in the other hemisphere
    quaternions[1::3] *= -1

    return quaternions


class KeyframeMixin:

    techniques = list(Technique)

    times = np.array([0, 0.4, 1.1, 1.5, 2.6])

    cycle_time = 3.2

    quaternions = random_keyframes(11, 5)

    seam_times = np.array([0, 0.5, 1.2, 2.0])

    seam_quaternions = np.vstack([random_keyframes(5, 3), random_keyframes(5, 3)[:1]])


class TestTechnique(TestCase):

    def test_values(self):

        self.assertIs(Technique('LoopSpline'), Technique.LOOP_SPLINE)
        self.assertIs(Technique('QuickSlerp'), Technique.QUICK_SLERP)
        self.assertEqual(len(Technique), 8)

    def test_is_cyclic(self):

        for technique in Technique:
            with self.subTest(technique=technique):
                self.assertEqual(technique.is_cyclic, technique.name.startswith('LOOP_'))

    def test_method(self):

        self.assertIs(Technique.LOOP_NLERP.method, Method.NLERP)
        self.assertIs(Technique.LOOP_QUICK_SLERP.method, Method.QUICK_SLERP)
        self.assertIs(Technique.SLERP.method, Method.SLERP)
        self.assertIs(Technique.LOOP_SPLINE.method, Method.SPLINE)
        self.assertIs(Technique.SPLINE.method, Method.SPLINE)

    def test_segment_plan(self):

        times = np.array([0, 1, 2.])

        self.assertEqual(Technique.SLERP.segment_plan(times, 2), (False, 2))
        self.assertEqual(Technique.LOOP_SLERP.segment_plan(times, 3), (True, 2))

        # the final keyframe is the seam
        self.assertEqual(Technique.LOOP_SLERP.segment_plan(times, 2), (True, 1))

        # a single segment cannot loop
        with self.assertLogs('rotcurve.interpolation', level='DEBUG'):
            self.assertEqual(Technique.LOOP_SPLINE.segment_plan(times[:2], 1), (False, 1))

        self.assertEqual(Technique.LOOP_SPLINE.segment_plan(times[:2], 1.5), (True, 1))


class TestFindPreviousIndex(TestCase):

    def test_find_previous_index(self):

        times = np.array([0, 1, 2.5, 4])

        self.assertEqual(find_previous_index(-1, times), -1)
        self.assertEqual(find_previous_index(0, times), 0)
        self.assertEqual(find_previous_index(0.99, times), 0)
        self.assertEqual(find_previous_index(1, times), 1)
        self.assertEqual(find_previous_index(3, times), 2)
        self.assertEqual(find_previous_index(4, times), 3)
        self.assertEqual(find_previous_index(10, times), 3)


class TestBlend(TestCase):

    def test_equal(self):

        for method in [Method.NLERP, Method.QUICK_SLERP, Method.SLERP]:
            with self.subTest(method=method):
                q = blend(0.3, Y90, Y90.copy(), method)

                np.testing.assert_array_equal(q, Y90)
                self.assertIsNot(q, Y90)

    def test_fraction(self):

        with self.assertRaises(PreconditionError):
            blend(1.5, IDENTITY, Y90, Method.SLERP)

        with self.assertRaises(ValueError):
            blend(0.5, IDENTITY, Y90, Method.SPLINE)


class TestInterpolate(KeyframeMixin, TestCase):

    def test_concrete(self):

        times = [0, 1, 2]
        quaternions = [IDENTITY, Y90, IDENTITY]

        np.testing.assert_allclose(Technique.SLERP.interpolate(0.5, times, 2, quaternions), Y45)

        np.testing.assert_array_equal(Technique.LOOP_SPLINE.interpolate(2.0, times, 2, quaternions),
                                      Technique.LOOP_SPLINE.interpolate(0.0, times, 2, quaternions))

    def test_endpoints(self):

        for technique in self.techniques:
            for index, time in enumerate(self.times):
                with self.subTest(technique=technique, index=index):
                    np.testing.assert_allclose(technique.interpolate(time, self.times, self.cycle_time,
                                                                     self.quaternions),
                                               self.quaternions[index], atol=1e-12)

    def test_endpoints_seam(self):

        cycle_time = self.seam_times[-1]

        for technique in self.techniques:
            for index, time in enumerate(self.seam_times):
                with self.subTest(technique=technique, index=index):
                    q = technique.interpolate(time, self.seam_times, cycle_time, self.seam_quaternions)

                    self.assertLess(rotation_distance(q, self.seam_quaternions[index]), 1e-12)

    def test_unit_norm(self):

        for technique in self.techniques:
            for time in np.linspace(0, self.cycle_time, 65):
                with self.subTest(technique=technique, time=time):
                    q = technique.interpolate(time, self.times, self.cycle_time, self.quaternions)

                    self.assertAlmostEqual(np.linalg.norm(q), 1)

    def test_continuity(self):

        eps = 1e-9

        for technique in [Technique.SLERP, Technique.SPLINE, Technique.NLERP, Technique.QUICK_SLERP]:
            for time in self.times[1:-1]:
                with self.subTest(technique=technique, time=time):
                    before = technique.interpolate(time - eps, self.times, self.cycle_time, self.quaternions)
                    after = technique.interpolate(time + eps, self.times, self.cycle_time, self.quaternions)

                    self.assertLess(rotation_distance(before, after), 1e-6)

    def test_seam_continuity(self):

        eps = 1e-9

        for technique in [technique for technique in self.techniques if technique.is_cyclic]:
            for times, quaternions, cycle_time in [(self.times, self.quaternions, self.cycle_time),
                                                   (self.seam_times, self.seam_quaternions, self.seam_times[-1])]:
                with self.subTest(technique=technique, cycle_time=cycle_time):
                    before = technique.interpolate(cycle_time - eps, times, cycle_time, quaternions)
                    after = technique.interpolate(eps, times, cycle_time, quaternions)

                    self.assertLess(rotation_distance(before, after), 1e-6)

                    np.testing.assert_array_equal(technique.interpolate(cycle_time, times, cycle_time, quaternions),
                                                  technique.interpolate(0, times, cycle_time, quaternions))

    def test_loop_spline_smooth_at_seam(self):

        h = 1e-5
        times = np.arange(4.)
        cycle_time = 4
        quaternions = random_keyframes(23, 4)

        def sample(time):
            return Technique.LOOP_SPLINE.interpolate(time, times, cycle_time, quaternions)

        # with evenly spaced keyframes the one sided derivatives at the loop seam agree
        start = sample(0)
        after = sample(h)
        before = sample(cycle_time - h)

        if np.inner(before, start) < 0:
            before = -before

        np.testing.assert_allclose((after - start) / h, (start - before) / h, atol=1e-3)

    def test_single_keyframe(self):

        for technique in self.techniques:
            for time in [0, 0.5, 3, 10]:
                with self.subTest(technique=technique, time=time):
                    np.testing.assert_array_equal(technique.interpolate(time, [0], 3, [Y90]), Y90)

    def test_before_and_after(self):

        times = [1, 2]

        for technique in [Technique.NLERP, Technique.QUICK_SLERP, Technique.SLERP, Technique.SPLINE]:
            with self.subTest(technique=technique):
                np.testing.assert_array_equal(technique.interpolate(0.5, times, 2, [Y45, Y90]), Y45)
                np.testing.assert_array_equal(technique.interpolate(7, times, 2, [Y45, Y90]), Y90)

    def test_antipodal(self):

        q = axis_angle_to_quaternion([1, 2, 3], 0.7)

        for technique in self.techniques:
            for time in np.linspace(0, 2, 9):
                with self.subTest(technique=technique, time=time):
                    result = technique.interpolate(time, [0, 1], 2, [q, -q])

                    self.assertLess(rotation_distance(result, q), 1e-12)

    def test_shortest_path(self):

        # the second keyframe is a 170 degree rotation stored in the other hemisphere
        q1 = -axis_angle_to_quaternion([0, 0, 1], np.radians(170))

        for technique in [Technique.NLERP, Technique.QUICK_SLERP, Technique.SLERP]:
            with self.subTest(technique=technique):
                result = technique.interpolate(0.5, [0, 1], 1, [IDENTITY, q1])

                angle = 2 * np.arccos(min(abs(result[-1]), 1))

                self.assertAlmostEqual(angle, np.radians(85))

    def test_slerp_constant_velocity(self):

        q1 = axis_angle_to_quaternion([1, 1, 0], 2.5)

        samples = np.array([Technique.SLERP.interpolate(t, [0, 1], 1, [IDENTITY, q1]) for t in np.linspace(0, 1, 6)])

        steps = np.arccos(np.clip((samples[1:] * samples[:-1]).sum(axis=-1), -1, 1))

        np.testing.assert_allclose(steps, 2.5 / 10)

    def test_out(self):

        out = np.zeros(4)

        result = Technique.SLERP.interpolate(0.5, [0, 1, 2], 2, [IDENTITY, Y90, IDENTITY], out=out)

        self.assertIs(result, out)
        np.testing.assert_allclose(out, Y45)

        result = Technique.SPLINE.interpolate(5, [0, 1, 2], 2, [IDENTITY, Y90, IDENTITY], out=out)

        self.assertIs(result, out)
        np.testing.assert_array_equal(out, IDENTITY)

    def test_inputs_unchanged(self):

        quaternions = self.quaternions.copy()

        for technique in self.techniques:
            technique.interpolate(0.7, self.times, self.cycle_time, quaternions)

        np.testing.assert_array_equal(quaternions, self.quaternions)

    def test_cyclic_out_of_range(self):

        with self.assertRaises(PreconditionError):
            Technique.LOOP_SLERP.interpolate(self.cycle_time + 0.1, self.times, self.cycle_time, self.quaternions)

        with self.assertRaises(PreconditionError):
            Technique.LOOP_SPLINE.interpolate(self.cycle_time + 0.1, self.times, self.cycle_time, self.quaternions)

    def test_not_unit(self):

        quaternions = self.quaternions.copy()
        quaternions[2] *= 1.5

        for technique in self.techniques:
            with self.subTest(technique=technique):
                with self.assertRaises(PreconditionError):
                    technique.interpolate(1.2, self.times, self.cycle_time, quaternions)

        options = InterpolationOptions(strict=False)

        for technique in self.techniques:
            with self.subTest(technique=technique, strict=False):
                with self.assertLogs('rotcurve', level='WARNING'):
                    q = technique.interpolate(1.2, self.times, self.cycle_time, quaternions, options=options)

                self.assertAlmostEqual(np.linalg.norm(q), 1)

        # a looser tolerance accepts the quaternion as is
        quaternions[2] = self.quaternions[2] * 1.001

        q = Technique.NLERP.interpolate(1.2, self.times, self.cycle_time, quaternions,
                                        options=InterpolationOptions(unit_tolerance=1e-2))

        self.assertAlmostEqual(np.linalg.norm(q), 1)

    def test_invalid(self):

        with self.assertRaises(InvalidArgumentError):
            Technique.SLERP.interpolate(0.5, [0, 1], 0.5, [IDENTITY, Y90])

        with self.assertRaises(InvalidArgumentError):
            Technique.SLERP.interpolate(0.5, [0, 1, 2], 2, [IDENTITY, Y90])

        with self.assertRaises(InvalidArgumentError):
            Technique.SLERP.interpolate(0.5, [1, 0], 2, [IDENTITY, Y90])

        # the time check can be disabled
        Technique.SLERP.interpolate(0.5, [0, 1], 2, [IDENTITY, Y90], options=InterpolationOptions(check_times=False))


class TestPrecompute(KeyframeMixin, TestCase):

    def test_idempotent(self):

        for technique in self.techniques:
            for times, quaternions, cycle_time in [(self.times, self.quaternions, self.cycle_time),
                                                   (self.seam_times, self.seam_quaternions, self.seam_times[-1]),
                                                   (self.times[:2], self.quaternions[:2], self.times[1])]:
                curve = technique.precompute(times, cycle_time, quaternions)

                for time in np.linspace(-0.5, cycle_time, 47):
                    with self.subTest(technique=technique, cycle_time=cycle_time, time=time):
                        np.testing.assert_allclose(technique.interpolate_curve(time, curve),
                                                   technique.interpolate(time, times, cycle_time, quaternions),
                                                   atol=1e-12)

    def test_spline_cache(self):

        curve = Technique.SPLINE.precompute(self.times, self.cycle_time, self.quaternions)

        self.assertIsInstance(curve, RotationCurve)
        self.assertTrue(curve.is_precomputed)
        self.assertEqual(curve.last_index, 4)

        for index in range(4):
            with self.subTest(index=index):
                self.assertAlmostEqual(curve.get_interval_duration(index), self.times[index + 1] - self.times[index])
                self.assertLess(rotation_distance(curve.get_end_value(index), self.quaternions[index + 1]), 1e-15)

                # the end value is sign corrected against the start value
                self.assertGreaterEqual(np.inner(curve.get_start_value(index), curve.get_end_value(index)), 0)

    def test_loop_spline_cache(self):

        curve = Technique.LOOP_SPLINE.precompute(self.times, self.cycle_time, self.quaternions)

        self.assertEqual(curve.last_index, 4)
        self.assertAlmostEqual(curve.get_interval_duration(4), self.cycle_time - self.times[4])
        self.assertLess(rotation_distance(curve.get_end_value(4), self.quaternions[0]), 1e-15)

        curve = Technique.LOOP_SPLINE.precompute(self.seam_times, self.seam_times[-1], self.seam_quaternions)

        self.assertEqual(curve.last_index, 2)
        self.assertAlmostEqual(curve.get_interval_duration(2), self.seam_times[3] - self.seam_times[2])

    def test_linear_curve(self):

        curve = Technique.LOOP_NLERP.precompute(self.seam_times, self.seam_times[-1], self.seam_quaternions)

        self.assertFalse(curve.is_precomputed)
        self.assertEqual(curve.last_index, 2)

    def test_wrong_curve(self):

        with self.assertRaises(PreconditionError):
            Technique.SPLINE.interpolate_curve(0.5, RotationCurve(self.times, self.cycle_time, self.quaternions))

        curve = Technique.SPLINE.precompute(self.times, self.cycle_time, self.quaternions)

        # fine for a non spline technique
        Technique.SLERP.interpolate_curve(0.5, curve)

        curve = Technique.SPLINE.precompute(self.seam_times, self.seam_times[-1], self.seam_quaternions)

        with self.assertRaises(PreconditionError):
            Technique.LOOP_SPLINE.interpolate_curve(0.5, curve)

    def test_wrong_curve_same_last_index(self):

        # the cycle time is after the final keyframe, so both spline caches end on the same keyframe
        times = [0, 1, 2]
        quaternions = [axis_angle_to_quaternion([0, 1, 0], angle) for angle in [0, 0.8, 1.6]]

        acyclic = Technique.SPLINE.precompute(times, 3, quaternions)
        cyclic = Technique.LOOP_SPLINE.precompute(times, 3, quaternions)

        self.assertEqual(acyclic.last_index, cyclic.last_index)
        self.assertFalse(acyclic.is_cyclic)
        self.assertTrue(cyclic.is_cyclic)

        with self.assertRaises(PreconditionError):
            Technique.LOOP_SPLINE.interpolate_curve(2.5, acyclic)

        with self.assertRaises(PreconditionError):
            Technique.SPLINE.interpolate_curve(0.5, cyclic)

        np.testing.assert_allclose(Technique.LOOP_SPLINE.interpolate_curve(2.5, cyclic),
                                   Technique.LOOP_SPLINE.interpolate(2.5, times, 3, quaternions), atol=1e-15)

    def test_linear_curve_matches_raw(self):

        for technique in [technique for technique in self.techniques if technique.method is not Method.SPLINE]:
            for times, quaternions, cycle_time in [(self.times, self.quaternions, self.cycle_time),
                                                   (self.seam_times, self.seam_quaternions, self.seam_times[-1])]:
                curve = technique.precompute(times, cycle_time, quaternions)

                self.assertEqual(curve.is_cyclic, technique.is_cyclic)

                for time in np.linspace(-0.5, cycle_time, 23):
                    with self.subTest(technique=technique, cycle_time=cycle_time, time=time):
                        np.testing.assert_array_equal(technique.interpolate_curve(time, curve),
                                                      technique.interpolate(time, times, cycle_time, quaternions))

    def test_not_unit(self):

        quaternions = self.quaternions.copy()
        quaternions[0] *= 2

        with self.assertRaises(PreconditionError):
            Technique.SPLINE.precompute(self.times, self.cycle_time, quaternions)

        with self.assertLogs('rotcurve.quaternions', level='WARNING'):
            curve = Technique.SPLINE.precompute(self.times, self.cycle_time, quaternions,
                                                options=InterpolationOptions(strict=False))

        np.testing.assert_allclose(curve.quaternions[0], self.quaternions[0])

    def test_out(self):

        curve = Technique.LOOP_SPLINE.precompute([0, 1, 2], 2, [IDENTITY, Y90, IDENTITY])

        out = np.empty(4)

        self.assertIs(Technique.LOOP_SPLINE.interpolate_curve(0.5, curve, out=out), out)

        np.testing.assert_allclose(out, Technique.LOOP_SPLINE.interpolate(0.5, [0, 1, 2], 2, [IDENTITY, Y90, IDENTITY]),
                                   atol=1e-15)
