from unittest import TestCase

import numpy as np

from rotcurve import RotationTrack, RotationTrackOptions, Technique
from rotcurve.errors import PreconditionError
from rotcurve.quaternions import axis_angle_to_quaternion


IDENTITY = np.array([0, 0, 0, 1.])

Y90 = axis_angle_to_quaternion([0, 1, 0], np.pi / 2)


class TestRotationTrack(TestCase):

    def setUp(self):

        self.times = [0, 1, 2]

        self.quaternions = [IDENTITY, Y90, IDENTITY]

    def test_defaults(self):

        track = RotationTrack(self.times, 2, self.quaternions)

        self.assertIs(track.technique, Technique.SLERP)
        self.assertTrue(track.precompute)
        self.assertTrue(track.strict)
        self.assertEqual(track.cycle_time, 2)

        np.testing.assert_allclose(track.sample(0.5), axis_angle_to_quaternion([0, 1, 0], np.pi / 4))

    def test_technique_name(self):

        track = RotationTrack(self.times, 2, self.quaternions, RotationTrackOptions(technique='LoopSpline'))

        self.assertIs(track.technique, Technique.LOOP_SPLINE)
        self.assertTrue(track.curve.is_precomputed)
        self.assertEqual(track.curve.last_index, 1)

    def test_sample_array(self):

        track = RotationTrack(self.times, 2, self.quaternions, RotationTrackOptions(technique=Technique.LOOP_SPLINE))

        times = np.linspace(0, 2, 9)

        samples = track.sample(times)

        self.assertEqual(samples.shape, (9, 4))

        for time, sample in zip(times, samples):
            with self.subTest(time=time):
                np.testing.assert_allclose(sample, Technique.LOOP_SPLINE.interpolate(time, self.times, 2,
                                                                                     self.quaternions))

        self.assertEqual(track.sample([]).shape, (0, 4))

    def test_wrap(self):

        for technique in [Technique.LOOP_SLERP, Technique.LOOP_SPLINE]:
            track = RotationTrack(self.times, 2, self.quaternions, RotationTrackOptions(technique=technique))

            for time in [0.3, 1.7]:
                with self.subTest(technique=technique, time=time):
                    np.testing.assert_allclose(track.sample(time + 2), track.sample(time))
                    np.testing.assert_allclose(track.sample(time + 6), track.sample(time))

            np.testing.assert_array_equal(track.sample(2), track.sample(0))

    def test_no_wrap(self):

        track = RotationTrack(self.times, 3, [IDENTITY, Y90, Y90], RotationTrackOptions(technique=Technique.SPLINE))

        np.testing.assert_array_equal(track.sample(5), Y90)

    def test_single_segment_loop(self):

        # two keyframes with the last on the seam cannot loop, so the track holds like the acyclic technique
        for precompute in [True, False]:
            with self.subTest(precompute=precompute):
                track = RotationTrack([0, 1], 1, [IDENTITY, Y90],
                                      RotationTrackOptions(technique=Technique.LOOP_SLERP, precompute=precompute))

                np.testing.assert_allclose(track.sample(1.0), Y90)
                np.testing.assert_allclose(track.sample(1.0),
                                           Technique.LOOP_SLERP.interpolate(1.0, [0, 1], 1, [IDENTITY, Y90]))
                np.testing.assert_allclose(track.sample(3.5), Y90)

    def test_no_precompute(self):

        options = RotationTrackOptions(technique=Technique.SPLINE, precompute=False)

        track = RotationTrack(self.times, 2, self.quaternions, options)

        self.assertFalse(track.curve.is_precomputed)

        precomputed = RotationTrack(self.times, 2, self.quaternions, RotationTrackOptions(technique=Technique.SPLINE))

        for time in np.linspace(0, 2, 7):
            with self.subTest(time=time):
                np.testing.assert_allclose(track.sample(time), precomputed.sample(time))

    def test_sample_matrix(self):

        track = RotationTrack(self.times, 2, self.quaternions)

        np.testing.assert_allclose(track.sample_matrix(1), [[0, 0, 1], [0, 1, 0], [-1, 0, 0]], atol=1e-15)

        matrices = track.sample_matrix([0, 1])

        self.assertEqual(matrices.shape, (2, 3, 3))
        np.testing.assert_allclose(matrices[0], np.eye(3))

        self.assertEqual(track.sample_matrix([1]).shape, (1, 3, 3))

    def test_validation(self):

        quaternions = [IDENTITY, 2 * Y90, IDENTITY]

        with self.assertRaises(PreconditionError):
            RotationTrack(self.times, 2, quaternions)

        with self.assertLogs('rotcurve', level='WARNING'):
            track = RotationTrack(self.times, 2, quaternions, RotationTrackOptions(strict=False))

        np.testing.assert_allclose(track.sample(1), Y90)

    def test_reset_settings(self):

        track = RotationTrack(self.times, 2, self.quaternions, RotationTrackOptions(technique=Technique.NLERP))

        track.technique = Technique.LOOP_SPLINE
        track.rebuild()

        self.assertTrue(track.curve.is_precomputed)

        track.reset_settings()

        self.assertIs(track.technique, Technique.NLERP)
        self.assertFalse(track.curve.is_precomputed)
        self.assertIs(track.original_options.technique, Technique.NLERP)
