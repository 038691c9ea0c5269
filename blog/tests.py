"""Blog app tests."""

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from blog.models import BlogPost


def bilingual(en, zh):
	return {'en': en, 'zh-TW': zh}


class BlogPostModelTests(TestCase):

	def test_slug_from_english_title_with_suffixes(self):
		first = BlogPost.objects.create(title=bilingual('Hello World', '你好'), category='news')
		second = BlogPost.objects.create(title=bilingual('Hello World', '你好'), category='news')
		third = BlogPost.objects.create(title=bilingual('Hello World', '你好'), category='news')
		self.assertEqual([first.slug, second.slug, third.slug], ['hello-world', 'hello-world-1', 'hello-world-2'])

	def test_slug_follows_title_changes(self):
		post = BlogPost.objects.create(title=bilingual('Draft Title', '草稿'), category='news')
		post.content = bilingual('Body', '內容')
		post.save()
		self.assertEqual(post.slug, 'draft-title')

		post.title = bilingual('Final Title', '定稿')
		post.save()
		self.assertEqual(post.slug, 'final-title')

	def test_only_one_featured_post(self):
		first = BlogPost.objects.create(title=bilingual('One', '一'), category='news', featured=True)
		second = BlogPost.objects.create(title=bilingual('Two', '二'), category='news', featured=True)
		first.refresh_from_db()
		self.assertFalse(first.featured)
		self.assertTrue(second.featured)


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class BlogApiTests(TestCase):

	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.admin = User.objects.create_user(
			username='admin_user', email='admin@example.com', password='12345678', role='admin', name='Editor',
		)
		cls.reader = User.objects.create_user(
			username='reader', email='reader@example.com', password='12345678',
		)
		cls.published = BlogPost.objects.create(
			title=bilingual('Spring Sale', '春季特賣'), content=bilingual('Deals', '優惠'),
			category='news', status='published', author=cls.admin,
		)
		cls.draft = BlogPost.objects.create(
			title=bilingual('Upcoming', '即將推出'), content=bilingual('Soon', '快了'), category='news',
		)

	def setUp(self):
		self.client = APIClient()

	def test_public_list_shows_published_only(self):
		res = self.client.get('/api/blog/posts/')
		self.assertEqual(res.status_code, 200)
		body = res.json()
		self.assertEqual(body['total'], 1)
		self.assertEqual(body['totalPages'], 1)
		self.assertEqual(body['posts'][0]['slug'], 'spring-sale')
		self.assertEqual(body['posts'][0]['author']['name'], 'Editor')

	def test_admin_list_requires_admin(self):
		res = self.client.get('/api/blog/posts/', {'admin': 'true'})
		self.assertEqual(res.status_code, 401)

		self.client.force_authenticate(user=self.reader)
		self.assertEqual(self.client.get('/api/blog/posts/', {'admin': 'true'}).status_code, 401)

		self.client.force_authenticate(user=self.admin)
		res = self.client.get('/api/blog/posts/', {'admin': 'true'})
		self.assertEqual(res.json()['total'], 2)

	def test_exclude_featured(self):
		BlogPost.objects.filter(pk=self.published.pk).update(featured=True)
		res = self.client.get('/api/blog/posts/', {'excludeFeatured': 'true'})
		self.assertEqual(res.json()['total'], 0)

	def test_create_requires_both_languages(self):
		self.client.force_authenticate(user=self.admin)
		res = self.client.post('/api/blog/posts/', {
			'title': {'en': 'Only English'},
			'content': bilingual('Body', '內容'),
			'category': 'news',
		}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(res.json()['details']['title'], {'en': False, 'zh-TW': True})
		self.assertFalse(res.json()['details']['category'])

	def test_create_post(self):
		self.client.force_authenticate(user=self.admin)
		res = self.client.post('/api/blog/posts/', {
			'title': bilingual('New Arrivals', '新品上市'),
			'content': bilingual('Body', '內容'),
			'category': 'news',
			'status': 'published',
			'tags': [' tools ', ''],
		}, format='json')
		self.assertEqual(res.status_code, 201)
		post = res.json()['post']
		self.assertEqual(post['slug'], 'new-arrivals')
		self.assertEqual(post['tags'], ['tools'])
		self.assertIsNotNone(post['publishedAt'])
		self.assertEqual(post['author']['email'], 'admin@example.com')

	def test_reader_cannot_create(self):
		self.client.force_authenticate(user=self.reader)
		res = self.client.post('/api/blog/posts/', {'title': bilingual('x', 'y')}, format='json')
		self.assertEqual(res.status_code, 403)

	def test_get_by_id_or_slug(self):
		res = self.client.get(f'/api/blog/posts/{self.published.pk}/')
		self.assertEqual(res.json()['slug'], 'spring-sale')
		res = self.client.get('/api/blog/posts/spring-sale/')
		self.assertEqual(res.json()['id'], self.published.pk)
		self.assertEqual(self.client.get('/api/blog/posts/missing/').status_code, 404)

	def test_first_publish_sets_published_at(self):
		self.client.force_authenticate(user=self.admin)
		res = self.client.put(f'/api/blog/posts/{self.draft.pk}/', {'status': 'published'}, format='json')
		self.assertEqual(res.status_code, 200)
		self.draft.refresh_from_db()
		self.assertIsNotNone(self.draft.published_at)

	def test_delete_post(self):
		self.client.force_authenticate(user=self.admin)
		res = self.client.delete(f'/api/blog/posts/{self.draft.pk}/')
		self.assertEqual(res.json(), {'success': True})
		self.assertFalse(BlogPost.objects.filter(pk=self.draft.pk).exists())

	def test_featured_post(self):
		self.assertEqual(self.client.get('/api/blog/featured/').status_code, 404)
		self.published.featured = True
		self.published.save()
		res = self.client.get('/api/blog/featured/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.json()['slug'], 'spring-sale')
